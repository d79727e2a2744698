# Created by Meri Kasprak with the assistance of Gemini.
# Released freely under the GNU General Public License version 3. USE AT YOUR OWN RISK.

from enum import Enum

from bs4 import BeautifulSoup

from media_classifier import MEDIA_TAGS, MEDIATYPE_AUDIO, SPOILER_CLASS, file_page_url
from page_output import PageOutput
from spoiler_config import ConfigurationInvalid
from spoiler_modes import Mode, msg
from spoiler_widgets import ButtonSpec, render_button

# --- DOM contract shared with the reveal script ---
COVER_CLASS = "spoiler-cover"
BUTTON_CLASS = "spoiler-button"
NOSPOILER_CLASS = "nospoiler"

FRAMED_SELECTOR = "figure[typeof~='mw:File/Thumb'], figure[typeof~='mw:File/Frame']"
MARKED_SELECTOR = "figure.spoiler[typeof~='mw:File/Thumb'], figure.spoiler[typeof~='mw:File/Frame']"
INLINE_SELECTOR = "[typeof~='mw:File']"


class DomShape(Enum):
    LEGACY = "legacy"   # <div class="thumb"> wraps the media directly
    MODERN = "modern"   # <figure typeof="mw:File/..."> wraps <a>/<span> wraps the media


class ModernMediaDom:
    """Node lookup for the <figure typeof="mw:File/..."> media markup."""
    shape = DomShape.MODERN

    def containers(self, soup, selector):
        return soup.select(selector)

    def wrapper(self, container):
        """First element child: the link (or span) around the media, or the media itself."""
        return container.find(True, recursive=False)

    def media(self, container):
        wrapper = self.wrapper(container)
        if wrapper is None:
            return None
        if wrapper.name in MEDIA_TAGS:
            return wrapper
        return wrapper.find(True, recursive=False)

    def link(self, container):
        wrapper = self.wrapper(container)
        if wrapper is not None and wrapper.name == 'a':
            return wrapper
        return None

    def is_coverable(self, container):
        # Audio players expose no height
        media = self.media(container)
        return media is not None and media.name in MEDIA_TAGS and media.has_attr('height')


MEDIA_DOMS = {
    DomShape.MODERN: ModernMediaDom,
}


def media_dom_for(config):
    """Picks the node-lookup strategy for the host's markup; legacy markup is unsupported."""
    shape = DomShape.LEGACY if config.legacy_media_dom else DomShape.MODERN
    if shape not in MEDIA_DOMS:
        raise ConfigurationInvalid("MediaSpoiler requires legacy_media_dom to be false")
    return MEDIA_DOMS[shape]()


def _classes(tag):
    value = tag.get('class', [])
    if isinstance(value, str):
        value = value.split()
    return list(value)


def add_class(tag, name):
    classes = _classes(tag)
    if name in classes:
        return False
    tag['class'] = classes + [name]
    return True


def remove_class(tag, name):
    classes = _classes(tag)
    if name not in classes:
        return False
    tag['class'] = [c for c in classes if c != name]
    return True


def _as_mode(mode):
    if mode is None or isinstance(mode, Mode):
        return mode
    try:
        return Mode(mode)
    except ValueError:
        return None


# --- Transforms on one container ---

def cover_container(soup, container, dom, config, output, fallback_href=""):
    """
    Hides one coverable container behind a reveal button.
    Returns False when the container already carries a cover.
    """
    if container.find(class_=COVER_CLASS, recursive=False) is not None:
        return False

    # A covered container is never also opted out
    remove_class(container, NOSPOILER_CLASS)
    add_class(container, SPOILER_CLASS)

    href = ''
    link = dom.link(container)
    if link is not None:
        href = link.get('href', '')
        if link.has_attr('href'):
            del link['href']
        link['role'] = 'link'
        link['aria-disabled'] = 'true'

    media = dom.media(container)
    if media is not None and media.name == 'video' and media.has_attr('controls'):
        del media['controls']

    if not href:
        title = media.get('data-mwtitle', '') if media is not None else ''
        if title:
            href = file_page_url(title, config.get("file_namespace", "File"), config.get("article_path", "/wiki/$1"))
        else:
            href = fallback_href

    output.enable_reveal()

    button = ButtonSpec(
        label=msg("mediaspoiler-viewmedia", output.language),
        href=href,
        icon="eye",
        flags=["primary", "progressive"],
        classes=[BUTTON_CLASS],
        infusable=True,
    )
    widget = BeautifulSoup(render_button(button), 'html.parser').find(True)
    cover = soup.new_tag('div', attrs={"class": COVER_CLASS})
    cover.append(widget.extract())
    container.append(cover)
    return True


def opt_out_container(container, dom):
    """ShowAll on a pre-marked item: tag it 'nospoiler', leave the structure alone."""
    if SPOILER_CLASS not in _classes(container) or not dom.is_coverable(container):
        return False
    return add_class(container, NOSPOILER_CLASS)


def replace_with_link(soup, container, dom, descriptor, file_info, output):
    """Swaps the media node for a plain link to the file description page."""
    wrapper = dom.wrapper(container)
    if wrapper is None:
        return False

    attrs = {"class": "mw-file-element mw-broken-media"}
    if descriptor.width is not None:
        attrs["data-width"] = str(descriptor.width)
    if descriptor.height is not None:
        attrs["data-height"] = str(descriptor.height)
    placeholder = soup.new_tag('span', attrs=attrs)
    placeholder.string = descriptor.title or file_info.prefixed_text

    link = soup.new_tag('a', attrs={"href": file_info.description_url, "title": file_info.prefixed_text})
    link.append(placeholder)
    wrapper.replace_with(link)

    output.enable_noimg()
    return True


# --- Entry points ---

def rewrite(fragment_html, mode, descriptor, file_info, config, output=None):
    """
    Rewrites the minimal HTML fragment of one media embed for the given mode.
    Returns the input unchanged whenever no transform applies.
    """
    mode = _as_mode(mode)
    hide = mode == Mode.HIDEALL or (config.enable_mark and mode == Mode.HIDEMARKED)
    opt_out = config.enable_mark and mode == Mode.SHOWALL
    if mode != Mode.NOIMG and not (hide or opt_out):
        return fragment_html

    # Checked before any per-embed skip
    dom = media_dom_for(config)
    if descriptor is None:
        return fragment_html
    if file_info is not None and not file_info.exists:
        return fragment_html
    output = output or PageOutput(config.language)

    if mode == Mode.NOIMG:
        if file_info is None:
            return fragment_html
        if descriptor.has_visible_caption:
            selector = FRAMED_SELECTOR
        elif descriptor.is_plain_image:
            # Nothing distinctive to drop from a bare image
            return fragment_html
        else:
            selector = INLINE_SELECTOR
        soup = BeautifulSoup(fragment_html, 'html.parser')
        container = soup.select_one(selector)
        if container is None or not replace_with_link(soup, container, dom, descriptor, file_info, output):
            return fragment_html
        return str(soup)

    if not descriptor.has_visible_caption:
        return fragment_html

    soup = BeautifulSoup(fragment_html, 'html.parser')
    container = soup.select_one(FRAMED_SELECTOR)
    if container is None:
        return fragment_html

    if hide:
        marked = descriptor.is_marked_sensitive or SPOILER_CLASS in _classes(container)
        if mode == Mode.HIDEMARKED and not marked:
            return fragment_html
        if descriptor.media_type == MEDIATYPE_AUDIO or not dom.is_coverable(container):
            return fragment_html
        fallback = descriptor.href or (file_info.description_url if file_info else '')
        changed = cover_container(soup, container, dom, config, output, fallback)
    else:
        changed = opt_out_container(container, dom)

    return str(soup) if changed else fragment_html


def rewrite_page_report(page_html, mode, config, output=None):
    """
    Applies the user's hide/reveal mode to every eligible figure of a page.
    Returns (html, fixes) where fixes lists what was done, in document order.
    """
    mode = _as_mode(mode)
    if mode == Mode.HIDEALL:
        selector, opt_out = FRAMED_SELECTOR, False
    elif config.enable_mark and mode == Mode.HIDEMARKED:
        selector, opt_out = MARKED_SELECTOR, False
    elif config.enable_mark and mode == Mode.SHOWALL:
        selector, opt_out = MARKED_SELECTOR, True
    else:
        return page_html, []

    dom = media_dom_for(config)
    output = output or PageOutput(config.language)
    soup = BeautifulSoup(page_html, 'html.parser')
    figures = dom.containers(soup, selector)
    if not figures:
        return page_html, []

    fixes = []
    for figure in figures:
        media = dom.media(figure)
        name = media.get('data-mwtitle', media.name) if media is not None else 'figure'
        if opt_out:
            if opt_out_container(figure, dom):
                fixes.append(f"Marked '{name}' as shown")
            continue
        # Skip for audio files
        if not dom.is_coverable(figure):
            continue
        if cover_container(soup, figure, dom, config, output):
            fixes.append(f"Covered '{name}' behind a reveal button")

    if not fixes:
        return page_html, []
    return str(soup), fixes


def rewrite_page(page_html, mode, config, output=None):
    html, _ = rewrite_page_report(page_html, mode, config, output)
    return html
