import unittest

from bs4 import BeautifulSoup

from media_classifier import (
    FileInfo,
    MEDIATYPE_AUDIO,
    MEDIATYPE_BITMAP,
    MEDIATYPE_VIDEO,
    classify,
)
from page_output import PageOutput
from spoiler_config import ConfigurationInvalid, SpoilerConfig
from spoiler_modes import Mode
from spoiler_rewriter import rewrite, rewrite_page, rewrite_page_report
from spoiler_widgets import button_href

THUMB = ('<figure typeof="mw:File/Thumb"><a href="/File:X"><img height="100" width="50"></a>'
         '<figcaption>c</figcaption></figure>')
MARKED_THUMB = ('<figure class="spoiler" typeof="mw:File/Thumb"><a href="/File:X"><img height="100" width="50"></a>'
                '<figcaption>c</figcaption></figure>')
AUDIO = ('<figure typeof="mw:File/Thumb"><a href="/wiki/File:Song.ogg"><audio controls data-mwtitle="Song.ogg"></audio></a>'
         '<figcaption>a</figcaption></figure>')
VIDEO = ('<figure class="spoiler" typeof="mw:File/Frame"><span><video controls height="240" width="320" '
         'data-mwtitle="Clip.webm"></video></span><figcaption>v</figcaption></figure>')
INLINE = '<p>Intro <span typeof="mw:File"><a href="/wiki/File:Icon.png"><img height="16" width="16"></a></span></p>'


def figure_of(html):
    return BeautifulSoup(html, 'html.parser').find('figure')


class TestRewritePage(unittest.TestCase):
    def setUp(self):
        self.config = SpoilerConfig()

    def test_hideall_covers_thumbnail(self):
        output = PageOutput()
        figure = figure_of(rewrite_page(THUMB, Mode.HIDEALL, self.config, output))

        self.assertIn("spoiler", figure['class'])
        link = figure.find('a')
        self.assertFalse(link.has_attr('href'))
        self.assertEqual(link['role'], "link")
        self.assertEqual(link['aria-disabled'], "true")

        last = figure.find_all(True, recursive=False)[-1]
        self.assertEqual(last.name, "div")
        self.assertEqual(last['class'], ["spoiler-cover"])
        button = last.select_one('.spoiler-button')
        self.assertIsNotNone(button)
        self.assertEqual(button_href(button), "/File:X")
        self.assertIn("View media", button.get_text())
        self.assertIn("mediaspoiler.reveal", output.modules)

    def test_hideall_single_cover_per_figure(self):
        page = "<div>" + THUMB + MARKED_THUMB + "</div>"
        html, fixes = rewrite_page_report(page, Mode.HIDEALL, self.config)
        soup = BeautifulSoup(html, 'html.parser')
        self.assertEqual(len(fixes), 2)
        for figure in soup.find_all('figure'):
            self.assertEqual(len(figure.select('.spoiler-cover')), 1)

    def test_rewrite_twice_does_not_duplicate_cover(self):
        once = rewrite_page(THUMB, Mode.HIDEALL, self.config)
        twice = rewrite_page(once, Mode.HIDEALL, self.config)
        self.assertEqual(once, twice)
        self.assertEqual(len(BeautifulSoup(twice, 'html.parser').select('.spoiler-cover')), 1)

    def test_hidemarked_only_touches_marked(self):
        page = "<div>" + THUMB + MARKED_THUMB + "</div>"
        soup = BeautifulSoup(rewrite_page(page, Mode.HIDEMARKED, self.config), 'html.parser')
        plain, marked = soup.find_all('figure')
        self.assertIsNone(plain.select_one('.spoiler-cover'))
        self.assertEqual(plain.find('a')['href'], "/File:X")
        self.assertIsNotNone(marked.select_one('.spoiler-cover'))

    def test_hidemarked_ignored_without_marking(self):
        config = SpoilerConfig(enable_mark=False)
        self.assertEqual(rewrite_page(MARKED_THUMB, Mode.HIDEMARKED, config), MARKED_THUMB)

    def test_video_loses_controls(self):
        figure = figure_of(rewrite_page(VIDEO, Mode.HIDEMARKED, self.config))
        video = figure.find('video')
        self.assertFalse(video.has_attr('controls'))
        button = figure.select_one('.spoiler-button')
        self.assertEqual(button_href(button), "/wiki/File:Clip.webm")

    def test_audio_never_covered(self):
        for mode in Mode:
            output = PageOutput()
            html = rewrite_page(AUDIO, mode, self.config, output)
            self.assertEqual(html, AUDIO)
            self.assertEqual(output.bundles, [])

    def test_showall_marks_premarked_as_nospoiler(self):
        figure = figure_of(rewrite_page(MARKED_THUMB, Mode.SHOWALL, self.config))
        self.assertEqual(figure['class'], ["spoiler", "nospoiler"])
        self.assertIsNone(figure.select_one('.spoiler-cover'))
        self.assertEqual(figure.find('a')['href'], "/File:X")
        self.assertFalse(figure.find('a').has_attr('aria-disabled'))

    def test_hideall_after_showall_drops_opt_out(self):
        shown = rewrite_page(MARKED_THUMB, Mode.SHOWALL, self.config)
        figure = figure_of(rewrite_page(shown, Mode.HIDEALL, self.config))
        self.assertEqual(figure['class'], ["spoiler"])
        self.assertEqual(len(figure.select('.spoiler-cover')), 1)
        self.assertFalse(figure.find('a').has_attr('href'))

    def test_showall_leaves_unmarked_alone(self):
        self.assertEqual(rewrite_page(THUMB, Mode.SHOWALL, self.config), THUMB)

    def test_inline_embeds_untouched(self):
        self.assertEqual(rewrite_page(INLINE, Mode.HIDEALL, self.config), INLINE)

    def test_legacy_dom_raises_before_mutation(self):
        config = SpoilerConfig(legacy_media_dom=True)
        output = PageOutput()
        with self.assertRaises(ConfigurationInvalid):
            rewrite_page(THUMB, Mode.HIDEALL, config, output)
        self.assertEqual(output.bundles, [])

    def test_legacy_dom_irrelevant_for_noop_mode(self):
        config = SpoilerConfig(legacy_media_dom=True, enable_mark=False)
        self.assertEqual(rewrite_page(THUMB, Mode.SHOWALL, config), THUMB)

    def test_unknown_mode_is_noop(self):
        self.assertEqual(rewrite_page(THUMB, "bogus", self.config), THUMB)

    def test_figure_without_media_is_skipped(self):
        broken = '<figure typeof="mw:File/Thumb"><figcaption>c</figcaption></figure>'
        self.assertEqual(rewrite_page(broken, Mode.HIDEALL, self.config), broken)


class TestRewriteEmbed(unittest.TestCase):
    def setUp(self):
        self.config = SpoilerConfig()
        self.sunset = FileInfo(name="Sunset_view.jpg", media_type=MEDIATYPE_BITMAP, width=800, height=533)
        self.thumb = ('<figure typeof="mw:File/Thumb"><a href="/wiki/File:Sunset_view.jpg" class="mw-file-description">'
                      '<img src="sunset.jpg" width="220" height="147" data-mwtitle="Sunset_view.jpg"></a>'
                      '<figcaption>Sunset</figcaption></figure>')

    def test_noimg_replaces_media_with_link(self):
        params = {'frame': {'thumbnail': True, 'class': ''}, 'handler': {'width': 220, 'height': 147}}
        descriptor = classify(params, self.sunset)
        output = PageOutput()

        figure = figure_of(rewrite(self.thumb, Mode.NOIMG, descriptor, self.sunset, self.config, output))

        self.assertIsNone(figure.find('img'))
        link = figure.find(True, recursive=False)
        self.assertEqual(link.name, "a")
        self.assertEqual(link['href'], "/wiki/File:Sunset_view.jpg")
        placeholder = link.find('span')
        self.assertEqual(placeholder.get_text(), "File:Sunset view.jpg")
        self.assertEqual(placeholder['data-width'], "220")
        self.assertEqual(placeholder['data-height'], "147")
        self.assertIn("mw-broken-media", placeholder['class'])
        self.assertEqual(figure.find('figcaption').get_text(), "Sunset")
        self.assertEqual(output.module_styles, ["mediaspoiler.noimg"])
        self.assertEqual(output.modules, [])

    def test_noimg_skips_captionless_bitmap(self):
        html = '<span typeof="mw:File"><a href="/wiki/File:Sunset_view.jpg"><img width="220" height="147"></a></span>'
        descriptor = classify({'frame': {}, 'handler': {'width': 220}}, self.sunset)
        self.assertEqual(rewrite(html, Mode.NOIMG, descriptor, self.sunset, self.config), html)

    def test_noimg_replaces_captionless_video(self):
        clip = FileInfo(name="Clip.webm", media_type=MEDIATYPE_VIDEO)
        html = '<span typeof="mw:File"><span><video controls width="320" height="240"></video></span></span>'
        descriptor = classify({'frame': {}, 'handler': {'width': 320, 'height': 240}}, clip)

        soup = BeautifulSoup(rewrite(html, Mode.NOIMG, descriptor, clip, self.config), 'html.parser')

        self.assertIsNone(soup.find('video'))
        self.assertEqual(soup.find('a')['href'], "/wiki/File:Clip.webm")
        self.assertEqual(soup.find('a').get_text(), "File:Clip.webm")

    def test_noimg_missing_file_is_noop(self):
        missing = FileInfo(name="Gone.jpg", media_type=MEDIATYPE_BITMAP, exists=False)
        descriptor = classify({'frame': {'thumbnail': True}}, missing)
        self.assertEqual(rewrite(self.thumb, Mode.NOIMG, descriptor, missing, self.config), self.thumb)

    def test_noimg_legacy_dom_raises(self):
        descriptor = classify({'frame': {'framed': True}}, self.sunset)
        with self.assertRaises(ConfigurationInvalid):
            rewrite(self.thumb, Mode.NOIMG, descriptor, self.sunset, SpoilerConfig(legacy_media_dom=True))

    def test_legacy_dom_raises_for_skipped_embeds(self):
        legacy = SpoilerConfig(legacy_media_dom=True)
        bare = '<span typeof="mw:File"><a href="/wiki/File:Sunset_view.jpg"><img width="220" height="147"></a></span>'
        descriptor = classify({'frame': {}}, self.sunset)
        with self.assertRaises(ConfigurationInvalid):
            rewrite(bare, Mode.NOIMG, descriptor, self.sunset, legacy)
        with self.assertRaises(ConfigurationInvalid):
            rewrite(bare, Mode.NOIMG, descriptor, None, legacy)
        with self.assertRaises(ConfigurationInvalid):
            rewrite(bare, Mode.HIDEALL, descriptor, self.sunset, legacy)
        # ShowAll without marking never transforms
        no_mark = SpoilerConfig(legacy_media_dom=True, enable_mark=False)
        self.assertEqual(rewrite(bare, Mode.SHOWALL, descriptor, self.sunset, no_mark), bare)

    def test_noimg_without_container_is_noop(self):
        descriptor = classify({'frame': {'thumbnail': True}}, self.sunset)
        html = '<p>no media here</p>'
        self.assertEqual(rewrite(html, Mode.NOIMG, descriptor, self.sunset, self.config), html)

    def test_hideall_embed_gets_cover(self):
        descriptor = classify({'frame': {'thumbnail': True}, 'handler': {'height': 147}}, self.sunset)
        figure = figure_of(rewrite(self.thumb, Mode.HIDEALL, descriptor, self.sunset, self.config))
        self.assertEqual(len(figure.select('.spoiler-cover')), 1)
        self.assertEqual(button_href(figure.select_one('.spoiler-button')), "/wiki/File:Sunset_view.jpg")

    def test_hideall_embed_twice_keeps_one_cover(self):
        descriptor = classify({'frame': {'thumbnail': True}, 'handler': {'height': 147}}, self.sunset)
        once = rewrite(self.thumb, Mode.HIDEALL, descriptor, self.sunset, self.config)
        twice = rewrite(once, Mode.HIDEALL, descriptor, self.sunset, self.config)
        self.assertEqual(once, twice)
        self.assertEqual(len(BeautifulSoup(twice, 'html.parser').select('.spoiler-cover')), 1)

    def test_hidemarked_embed_requires_mark(self):
        params = {'frame': {'thumbnail': True, 'class': ''}, 'handler': {'height': 147}}
        descriptor = classify(params, self.sunset)
        self.assertEqual(rewrite(self.thumb, Mode.HIDEMARKED, descriptor, self.sunset, self.config), self.thumb)

        params['frame']['class'] = 'spoiler'
        descriptor = classify(params, self.sunset)
        figure = figure_of(rewrite(self.thumb, Mode.HIDEMARKED, descriptor, self.sunset, self.config))
        self.assertIn("spoiler", figure['class'])
        self.assertIsNotNone(figure.select_one('.spoiler-cover'))

    def test_audio_embed_never_covered(self):
        song = FileInfo(name="Song.ogg", media_type=MEDIATYPE_AUDIO)
        descriptor = classify({'frame': {'thumbnail': True, 'class': 'spoiler'}}, song)
        self.assertEqual(rewrite(AUDIO, Mode.HIDEALL, descriptor, song, self.config), AUDIO)

    def test_showall_embed_opt_out(self):
        descriptor = classify({'frame': {'thumbnail': True, 'class': 'spoiler'}}, self.sunset)
        marked = self.thumb.replace('<figure ', '<figure class="spoiler" ', 1)
        figure = figure_of(rewrite(marked, Mode.SHOWALL, descriptor, self.sunset, self.config))
        self.assertEqual(figure['class'], ["spoiler", "nospoiler"])

    def test_no_mode_is_noop(self):
        descriptor = classify({'frame': {'thumbnail': True}}, self.sunset)
        self.assertEqual(rewrite(self.thumb, None, descriptor, self.sunset, self.config), self.thumb)


if __name__ == "__main__":
    unittest.main()
