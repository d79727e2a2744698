# Created by Meri Kasprak with the assistance of Gemini.
# Released freely under the GNU General Public License version 3. USE AT YOUR OWN RISK.

"""
Reveal button markup.
The real widget library is out of reach here; this renders the same
"button with icon and label" structure its server-side widgets produce.
"""

import json
from dataclasses import dataclass, field
from typing import List

from bs4 import BeautifulSoup


@dataclass(frozen=True)
class ButtonSpec:
    label: str
    href: str = ""
    icon: str = ""
    flags: List[str] = field(default_factory=list)
    classes: List[str] = field(default_factory=list)
    infusable: bool = False


def _widget_classes(spec: ButtonSpec) -> List[str]:
    classes = [
        "oo-ui-widget",
        "oo-ui-widget-enabled",
        "oo-ui-buttonElement",
        "oo-ui-buttonElement-framed",
    ]
    if spec.icon:
        classes.append("oo-ui-iconElement")
    if spec.label:
        classes.append("oo-ui-labelElement")
    classes.extend(f"oo-ui-flaggedElement-{flag}" for flag in spec.flags)
    classes.append("oo-ui-buttonWidget")
    classes.extend(spec.classes)
    return classes


def render_button(spec: ButtonSpec) -> str:
    """Serializes a ButtonSpec into insertable HTML."""
    soup = BeautifulSoup("", 'html.parser')

    attrs = {"class": " ".join(_widget_classes(spec))}
    if spec.infusable:
        attrs["data-ooui"] = json.dumps({
            "_": "OO.ui.ButtonWidget",
            "href": spec.href,
            "icon": spec.icon,
            "label": spec.label,
            "flags": list(spec.flags),
            "classes": list(spec.classes),
        }, separators=(',', ':'))
    wrapper = soup.new_tag('span', attrs=attrs)

    link_attrs = {"role": "button", "tabindex": "0", "class": "oo-ui-buttonElement-button"}
    if spec.href:
        link_attrs["href"] = spec.href
        link_attrs["rel"] = "nofollow"
    button = soup.new_tag('a', attrs=link_attrs)

    if spec.icon:
        icon_class = f"oo-ui-iconElement-icon oo-ui-icon-{spec.icon}"
        if "primary" in spec.flags:
            icon_class += " oo-ui-image-invert"
        button.append(soup.new_tag('span', attrs={"class": icon_class}))

    label = soup.new_tag('span', attrs={"class": "oo-ui-labelElement-label"})
    label.string = spec.label
    button.append(label)

    wrapper.append(button)
    soup.append(wrapper)
    return str(soup)


def button_href(button_tag):
    """Reads the configured href back out of rendered button markup."""
    if button_tag.has_attr('data-ooui'):
        try:
            config = json.loads(button_tag['data-ooui'])
            if config.get('href'):
                return config['href']
        except ValueError:
            pass
    inner = button_tag if button_tag.name == 'a' else button_tag.find('a')
    if inner is not None:
        return inner.get('href', '')
    return ''
