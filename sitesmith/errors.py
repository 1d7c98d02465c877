from __future__ import annotations


class SitesmithError(Exception):
    pass


class ConfigError(SitesmithError):
    pass


class ContentError(SitesmithError):
    pass


class LayoutError(SitesmithError):
    pass


class RenderError(SitesmithError):
    pass


class AssetError(SitesmithError):
    pass


class FeedError(SitesmithError):
    pass


class BuildError(SitesmithError):
    pass


class DuplicateSlugError(BuildError):
    def __init__(self, duplicates: dict[str, list[str]]):
        self.duplicates = duplicates
        lines = [f"  - '{slug}': {', '.join(paths)}" for slug, paths in sorted(duplicates.items())]
        super().__init__("Duplicate slug detected:\n" + "\n".join(lines))
