# Created by Meri Kasprak with the assistance of Gemini.
# Released freely under the GNU General Public License version 3. USE AT YOUR OWN RISK.

import re
import urllib.parse
from dataclasses import dataclass
from typing import Optional

from bs4 import BeautifulSoup

# --- Media types (as reported by the host's file metadata) ---
MEDIATYPE_BITMAP = "BITMAP"
MEDIATYPE_DRAWING = "DRAWING"
MEDIATYPE_VIDEO = "VIDEO"
MEDIATYPE_AUDIO = "AUDIO"
MEDIATYPE_UNKNOWN = "UNKNOWN"

MEDIA_TYPES = [MEDIATYPE_BITMAP, MEDIATYPE_DRAWING, MEDIATYPE_VIDEO, MEDIATYPE_AUDIO, MEDIATYPE_UNKNOWN]

# Caption-bearing presentations
CAPTION_FRAMES = ['framed', 'thumbnail', 'manualthumb']

MEDIA_TAGS = ['img', 'video', 'audio']

SPOILER_CLASS = "spoiler"
NOT_PAGE_IMAGE_CLASS = "notpageimage"
# Author's class string, kept when page-image exclusion rewrites frame['class']
AUTHOR_CLASS_KEY = "author-class"


def split_classes(value):
    if isinstance(value, (list, tuple)):
        value = " ".join(value)
    return [c for c in re.split(r'\s+', value or '') if c]


def file_page_url(name, namespace="File", article_path="/wiki/$1"):
    """Local URL of a file description page ('Foo bar.jpg' -> '/wiki/File:Foo_bar.jpg')."""
    db_key = (name or '').strip().replace(' ', '_')
    if namespace and not db_key.startswith(namespace + ':'):
        db_key = f"{namespace}:{db_key}"
    return article_path.replace('$1', urllib.parse.quote(db_key, safe=':/_-.,()!~*\''))


@dataclass(frozen=True)
class FileInfo:
    """Already-resolved file metadata handed over by the host."""
    name: str
    media_type: str = MEDIATYPE_UNKNOWN
    exists: bool = True
    width: Optional[int] = None
    height: Optional[int] = None
    namespace: str = "File"
    article_path: str = "/wiki/$1"

    @property
    def prefixed_text(self):
        text = self.name.replace('_', ' ')
        if self.namespace and not text.startswith(self.namespace + ':'):
            text = f"{self.namespace}:{text}"
        return text

    @property
    def description_url(self):
        return file_page_url(self.name, self.namespace, self.article_path)

    @classmethod
    def from_config(cls, name, config, **kwargs):
        kwargs.setdefault("namespace", config.get("file_namespace", "File"))
        kwargs.setdefault("article_path", config.get("article_path", "/wiki/$1"))
        return cls(name=name, **kwargs)


@dataclass(frozen=True)
class MediaDescriptor:
    media_type: str
    has_visible_caption: bool
    is_marked_sensitive: bool
    title: str = ""
    width: Optional[int] = None
    height: Optional[int] = None
    href: str = ""

    @property
    def is_coverable(self):
        # Audio players expose no height
        return self.media_type != MEDIATYPE_AUDIO and self.height is not None

    @property
    def is_plain_image(self):
        return self.media_type in (MEDIATYPE_BITMAP, MEDIATYPE_DRAWING)


def has_visible_caption(params):
    frame = (params or {}).get('frame', {}) or {}
    return any(key in frame for key in CAPTION_FRAMES)


def _to_int(value):
    if value is None or value == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def classify(params, file_info):
    """
    Builds the MediaDescriptor for one embed from its render parameters
    (params['frame'], params['handler']) and the host's file metadata.
    """
    params = params or {}
    frame = params.get('frame', {}) or {}
    handler = params.get('handler', {}) or {}
    classes = split_classes(frame.get(AUTHOR_CLASS_KEY, frame.get('class', '')))

    media_type = file_info.media_type if file_info and file_info.media_type in MEDIA_TYPES else MEDIATYPE_UNKNOWN
    width = _to_int(handler.get('width'))
    height = _to_int(handler.get('height'))
    if file_info:
        if width is None:
            width = file_info.width
        if height is None:
            height = file_info.height
    if media_type == MEDIATYPE_AUDIO:
        height = None

    return MediaDescriptor(
        media_type=media_type,
        has_visible_caption=has_visible_caption(params),
        is_marked_sensitive=SPOILER_CLASS in classes and NOT_PAGE_IMAGE_CLASS not in classes,
        title=file_info.prefixed_text if file_info else "",
        width=width,
        height=height,
        href=file_info.description_url if file_info else "",
    )


def exclude_from_page_images(params, file_info, enable_mark):
    """
    Marked files must not be picked as the page's representative image.
    Appends 'notpageimage' to params['frame']['class'] and returns True when it did.
    """
    if not enable_mark or not has_visible_caption(params):
        return False
    if file_info is None:
        return False

    frame = params['frame']
    classes = split_classes(frame.get('class', ''))
    if SPOILER_CLASS in classes and NOT_PAGE_IMAGE_CLASS not in classes:
        frame[AUTHOR_CLASS_KEY] = frame.get('class', '') or ''
        frame['class'] = frame[AUTHOR_CLASS_KEY] + ' ' + NOT_PAGE_IMAGE_CLASS
        return True
    return False


def describe_fragment(html):
    """
    Classifies an already-rendered embed from its markup alone.
    Returns None when no File container is found.
    """
    soup = BeautifulSoup(html, 'html.parser')
    container = soup.select_one("[typeof~='mw:File'], [typeof~='mw:File/Thumb'], [typeof~='mw:File/Frame']")
    if container is None:
        return None

    typeof = split_classes(container.get('typeof', ''))
    media = container.find(MEDIA_TAGS)
    if media is None or media.name == 'audio':
        media_type = MEDIATYPE_AUDIO if media is not None else MEDIATYPE_UNKNOWN
    elif media.name == 'video':
        media_type = MEDIATYPE_VIDEO
    else:
        media_type = MEDIATYPE_BITMAP

    link = container.find('a')
    title = media.get('data-mwtitle', '') if media is not None else ''
    return MediaDescriptor(
        media_type=media_type,
        has_visible_caption=any(t in typeof for t in ('mw:File/Thumb', 'mw:File/Frame')),
        is_marked_sensitive=SPOILER_CLASS in container.get('class', []),
        title=title.replace('_', ' '),
        width=_to_int(media.get('width')) if media is not None else None,
        height=_to_int(media.get('height')) if media is not None else None,
        href=link.get('href', '') if link is not None else '',
    )
