# Created by Meri Kasprak with the assistance of Gemini.
# Released freely under the GNU General Public License version 3. USE AT YOUR OWN RISK.

"""
Reveal interaction for covered media.

The browser gets the same behaviour from the script in the reveal bundle;
this module runs it against a parsed page so covered output can be revealed
server-side (previews, exports, tests).
"""

from bs4 import BeautifulSoup

from spoiler_rewriter import BUTTON_CLASS, COVER_CLASS, NOSPOILER_CLASS, add_class
from spoiler_widgets import button_href


class ClickEvent:
    """Minimal stand-in for a DOM click event."""

    def __init__(self):
        self.default_prevented = False
        self.propagation_stopped = False

    def prevent_default(self):
        self.default_prevented = True

    def stop_propagation(self):
        self.propagation_stopped = True


class RevealControl:
    """One bound reveal button. Covered -> Revealed, never back."""

    def __init__(self, button):
        self.button = button
        self.href = button_href(button)
        self.figure = button.find_parent('figure')
        self.revealed = False

    def click(self, event=None):
        event = event or ClickEvent()
        event.prevent_default()
        event.stop_propagation()
        if self.revealed:
            return False

        if self.figure is not None:
            add_class(self.figure, NOSPOILER_CLASS)
            link = self.figure.find(True, recursive=False)
            if link is not None and link.name == 'a':
                if self.href:
                    link['href'] = self.href
                for attr in ('aria-disabled', 'role'):
                    if link.has_attr(attr):
                        del link[attr]

        cover = self.button.find_parent(class_=COVER_CLASS)
        if cover is not None:
            cover.decompose()
        self.revealed = True
        return True


class RevealController:
    """Binds every reveal button present at activation time."""

    def __init__(self, soup):
        self.soup = soup
        self.controls = []

    def bind(self):
        if not self.controls:
            self.controls = [RevealControl(b) for b in self.soup.select('.' + BUTTON_CLASS)]
        return self.controls

    def reveal(self, index=0):
        controls = self.bind()
        if index < 0 or index >= len(controls):
            return False
        return controls[index].click()

    def reveal_all(self):
        return sum(1 for control in self.bind() if control.click())


def reveal_all(html):
    """Returns the page with every covered figure revealed."""
    soup = BeautifulSoup(html, 'html.parser')
    controller = RevealController(soup)
    if not controller.reveal_all():
        return html
    return str(soup)
