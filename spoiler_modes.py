# Created by Meri Kasprak with the assistance of Gemini.
# Released freely under the GNU General Public License version 3. USE AT YOUR OWN RISK.

from enum import Enum

from bs4 import BeautifulSoup

PREFERENCE_KEY = "mediaspoiler"


class Mode(str, Enum):
    """Display policy for media embeds. Values are the stored preference strings."""
    HIDEMARKED = "hidemarked"   # hide media marked as sensitive
    SHOWALL = "showall"         # show all media
    HIDEALL = "hideall"         # hide all media
    NOIMG = "noimg"             # show links to media description pages only

    def __str__(self):
        return self.value


# --- Messages ---
MESSAGES = {
    "en": {
        "mediaspoiler-viewmedia": "View media",
        "mediaspoiler-pref-label": "Media display:",
        "mediaspoiler-pref-help": "Choose how images, videos and other media are shown on pages.",
        "mediaspoiler-pref-hidemarked": "Hide media marked as sensitive",
        "mediaspoiler-pref-showall": "Show all media",
        "mediaspoiler-pref-hideall": "Hide all media",
        "mediaspoiler-pref-noimg": "Show links to media description pages only",
    },
    "de": {
        "mediaspoiler-viewmedia": "Medium anzeigen",
        "mediaspoiler-pref-label": "Mediendarstellung:",
        "mediaspoiler-pref-hidemarked": "Als sensibel markierte Medien ausblenden",
        "mediaspoiler-pref-showall": "Alle Medien anzeigen",
        "mediaspoiler-pref-hideall": "Alle Medien ausblenden",
        "mediaspoiler-pref-noimg": "Nur Links zu den Dateibeschreibungsseiten anzeigen",
    },
}


def msg(key, lang="en"):
    """Looks up a message, falling back to English and then to the key itself."""
    table = MESSAGES.get(lang, {})
    if key in table:
        return table[key]
    return MESSAGES["en"].get(key, key)


def enabled_modes(enable_mark):
    """
    Ordered mapping of preference message key -> Mode.
    'hidemarked' only exists when marking is enabled, and then comes first.
    """
    options = {}
    if enable_mark:
        options["mediaspoiler-pref-hidemarked"] = Mode.HIDEMARKED
    options["mediaspoiler-pref-showall"] = Mode.SHOWALL
    options["mediaspoiler-pref-hideall"] = Mode.HIDEALL
    options["mediaspoiler-pref-noimg"] = Mode.NOIMG
    return options


def valid_mode_values(enable_mark):
    return [mode.value for mode in enabled_modes(enable_mark).values()]


def preference_field(enable_mark):
    """Settings descriptor for the 'mediaspoiler' select."""
    return {
        "type": "select",
        "options-messages": enabled_modes(enable_mark),
        "label-message": "mediaspoiler-pref-label",
        "help-message": "mediaspoiler-pref-help",
        "section": "rendering/files",
    }


def render_preference_select(enable_mark, current=None, lang="en"):
    """Renders the preference as a labelled <select> in registry order."""
    field = preference_field(enable_mark)
    soup = BeautifulSoup("", 'html.parser')

    wrapper = soup.new_tag('div', attrs={"class": "mediaspoiler-pref", "data-section": field["section"]})
    label = soup.new_tag('label', attrs={"for": "mw-input-wp" + PREFERENCE_KEY})
    label.string = msg(field["label-message"], lang)
    wrapper.append(label)

    select = soup.new_tag('select', attrs={"id": "mw-input-wp" + PREFERENCE_KEY, "name": "wp" + PREFERENCE_KEY})
    for message_key, mode in field["options-messages"].items():
        option = soup.new_tag('option', attrs={"value": mode.value})
        if current is not None and mode.value == str(current):
            option['selected'] = ""
        option.string = msg(message_key, lang)
        select.append(option)
    wrapper.append(select)

    help_text = soup.new_tag('div', attrs={"class": "mediaspoiler-pref-help"})
    help_text.string = msg(field["help-message"], lang)
    wrapper.append(help_text)

    soup.append(wrapper)
    return str(soup)
