# Created by Meri Kasprak with the assistance of Gemini.
# Released freely under the GNU General Public License version 3. USE AT YOUR OWN RISK.

from media_classifier import classify, exclude_from_page_images
from page_output import PageOutput
from preference_resolver import (
    JsonPreferenceStore,
    RenderOptions,
    resolve_default_options,
    resolve_for_cache_key,
    user_mode,
)
from spoiler_config import SpoilerConfig
from spoiler_io import SpoilerIO
from spoiler_modes import PREFERENCE_KEY, preference_field, render_preference_select
from spoiler_rewriter import rewrite, rewrite_page_report


class MediaSpoiler:
    """
    The embedding application's entry point.

    Stages, in the order a page render calls them:
      1. prepare_image_params()  - before an embed is rendered (page-image exclusion)
      2. render_embed()          - per embed, with the cached render options (noimg)
      3. render_page()           - once per page, with the live user (hide / reveal)
    """

    def __init__(self, config=None, store=None, io=None):
        self.config = config or SpoilerConfig.load()
        self.io = io or SpoilerIO()
        self.store = store or JsonPreferenceStore(self.config, io=self.io)

    # --- Preferences ---

    def default_options(self, default_options=None):
        return resolve_default_options(dict(default_options or {PREFERENCE_KEY: self.config.default_mode}),
                                       self.config, self.io)

    def preferences(self):
        return {PREFERENCE_KEY: preference_field(self.config.enable_mark)}

    def preferences_html(self, user=None):
        current = self.user_mode(user) if user is not None else None
        return render_preference_select(self.config.enable_mark, current, self.config.language)

    def user_mode(self, user):
        return user_mode(self.store, user, self.config, self.io)

    def render_options(self, user=None):
        return RenderOptions(self.store, user)

    # --- Render stages ---

    def prepare_image_params(self, params, file_info):
        """Mutates params so marked files are not chosen as the page image."""
        return exclude_from_page_images(params, file_info, self.config.enable_mark)

    def render_embed(self, html, params, file_info, render_options, output=None):
        mode = resolve_for_cache_key(render_options)
        if mode is None:
            return html
        descriptor = classify(params, file_info)
        return rewrite(html, mode, descriptor, file_info, self.config, output)

    def render_page(self, html, user, output=None):
        """Returns (html, output) so the caller can add the collected bundles to the page."""
        output = output or PageOutput(self.config.language)
        html, fixes = rewrite_page_report(html, self.user_mode(user), self.config, output)
        for fix in fixes:
            self.io.log(f"  - {fix}")
        return html, output
