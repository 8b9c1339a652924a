"""Valuebox configuration.

ValueBoxConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ValueBoxConfig:
    """Configuration for value box outputs and their host.

    Attributes:
        root: Project root directory. Always resolved to an absolute path on
              construction.
        host: Bind address for the demo host.
        port: Bind port for the demo host.
        static_prefix: URL prefix resource bundles are served under.
        marker_class: Discovery marker carried by every output root element.
        id_override_attr: Attribute that overrides an element's own id.
        binding_name: Name the client binding registers under.
        animation_name: Resource name of the count-up animation library.
        animation_version: Version of the animation library.
        animation_script: Script file of the animation library.
        animation_dir: Directory holding the animation library, relative to
            ``root`` unless absolute.
        animation_duration: Count-up duration in seconds.

    """

    root: Path = field(default_factory=Path.cwd)
    host: str = "127.0.0.1"
    port: int = 3000
    static_prefix: str = "/static"
    marker_class: str = "valuebox-output"
    id_override_attr: str = "data-output-id"
    binding_name: str = "valuebox"
    animation_name: str = "countup"
    animation_version: str = "2.8.0"
    animation_script: str = "countUp.umd.js"
    animation_dir: str = "lib/countup"
    animation_duration: float = 2.0

    def __post_init__(self) -> None:
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())
        if not self.static_prefix.startswith("/"):
            object.__setattr__(self, "static_prefix", "/" + self.static_prefix)
        object.__setattr__(self, "static_prefix", self.static_prefix.rstrip("/") or "/")

    @property
    def animation_path(self) -> Path:
        """Absolute path to the animation library directory."""
        path = Path(self.animation_dir)
        if path.is_absolute():
            return path
        return self.root / path

    def bundle_href(self, name: str, version: str) -> str:
        """URL prefix a named, versioned bundle is served under."""
        prefix = self.static_prefix.rstrip("/")
        return f"{prefix}/{name}-{version}"
