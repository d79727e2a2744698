# Created by Meri Kasprak with the assistance of Gemini.
# Released freely under the GNU General Public License version 3. USE AT YOUR OWN RISK.

REVEAL_BUNDLE = "mediaspoiler.reveal"
NOIMG_BUNDLE = "mediaspoiler.noimg"
ICONS_BUNDLE = "mediaspoiler.icons"

# --- Assets ---
REVEAL_CSS = """
figure.spoiler:not(.nospoiler) { position: relative; }
figure.spoiler:not(.nospoiler) > a > img,
figure.spoiler:not(.nospoiler) > a > video,
figure.spoiler:not(.nospoiler) > span > img,
figure.spoiler:not(.nospoiler) > span > video { filter: blur(24px); }
figure.spoiler:not(.nospoiler) > a { cursor: default; }
.spoiler-cover {
    position: absolute; top: 0; left: 0; right: 0; bottom: 0;
    display: flex; align-items: center; justify-content: center;
}
figure.spoiler > figcaption { position: relative; z-index: 1; }
"""

ICONS_CSS = """
.oo-ui-icon-eye {
    background-image: url("data:image/svg+xml,%3Csvg xmlns='http://www.w3.org/2000/svg' width='20' height='20' viewBox='0 0 20 20'%3E%3Cpath fill='%23fff' d='M10 14.5a4.5 4.5 0 1 1 4.5-4.5 4.5 4.5 0 0 1-4.5 4.5M10 3C3 3 0 10 0 10s3 7 10 7 10-7 10-7-3-7-10-7'/%3E%3Ccircle cx='10' cy='10' r='2.5' fill='%23fff'/%3E%3C/svg%3E");
    display: inline-block; width: 20px; height: 20px; vertical-align: middle;
}
"""

REVEAL_JS = """
(function () {
    var reveal = function (button) {
        var figure = button.closest('figure');
        var inner = button.querySelector('a');
        var href = inner ? inner.getAttribute('href') : null;
        button.addEventListener('click', function (e) {
            e.preventDefault();
            e.stopPropagation();
            if (!figure) { return; }
            figure.classList.add('nospoiler');
            var link = figure.firstElementChild;
            if (link && link.tagName === 'A') {
                if (href) { link.setAttribute('href', href); }
                link.removeAttribute('aria-disabled');
                link.removeAttribute('role');
            }
            var cover = button.closest('.spoiler-cover');
            if (cover) { cover.remove(); }
        }, { once: true });
    };
    var buttons = document.querySelectorAll('.spoiler-button');
    for (var i = 0; i < buttons.length; i++) {
        reveal(buttons[i]);
    }
}());
"""

NOIMG_CSS = """
.mw-broken-media { display: inline-block; padding: 4px 8px; border: 1px dashed #a2a9b1; }
.mw-broken-media[data-width] { min-width: 4em; }
"""

RESOURCE_BUNDLES = {
    REVEAL_BUNDLE: {"styles": [REVEAL_CSS], "scripts": [REVEAL_JS]},
    ICONS_BUNDLE: {"styles": [ICONS_CSS], "scripts": []},
    NOIMG_BUNDLE: {"styles": [NOIMG_CSS], "scripts": []},
}


class PageOutput:
    """
    Collects the bundles one page render needs.
    Enabling is a set union: asking twice for the same bundle is a no-op.
    """

    def __init__(self, language="en"):
        self.language = language
        self.modules = []
        self.module_styles = []

    def add_modules(self, names):
        for name in names:
            if name not in RESOURCE_BUNDLES:
                raise KeyError(f"Unknown resource bundle '{name}'")
            if name not in self.modules:
                self.modules.append(name)

    def add_module_styles(self, names):
        for name in names:
            if name not in RESOURCE_BUNDLES:
                raise KeyError(f"Unknown resource bundle '{name}'")
            if name not in self.module_styles:
                self.module_styles.append(name)

    def enable_reveal(self):
        self.add_module_styles([REVEAL_BUNDLE, ICONS_BUNDLE])
        self.add_modules([REVEAL_BUNDLE])

    def enable_noimg(self):
        self.add_module_styles([NOIMG_BUNDLE])

    @property
    def bundles(self):
        seen = []
        for name in self.module_styles + self.modules:
            if name not in seen:
                seen.append(name)
        return seen

    def head_html(self):
        """Inline <style>/<script> markup for every collected bundle."""
        parts = []
        for name in self.module_styles:
            for css in RESOURCE_BUNDLES[name]["styles"]:
                parts.append(f'<style data-bundle="{name}">{css}</style>')
        for name in self.modules:
            for js in RESOURCE_BUNDLES[name]["scripts"]:
                parts.append(f'<script data-bundle="{name}">{js}</script>')
        return "\n".join(parts)
