from dataclasses import dataclass, field


@dataclass(frozen=True)
class ScriptEntry:
    name: str
    path: str  # path of the script inside the remote repository, e.g. "foo.sh"
    packages: tuple[str, ...] = field(default_factory=tuple)
    description: str | None = None

    def __post_init__(self):
        # Lists are accepted; always stored as a tuple
        object.__setattr__(self, "packages", tuple(self.packages))
