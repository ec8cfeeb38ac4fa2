"""Tag value object"""

from .validation import require_text


class Tag:
    """Issue tag; two tags are the same tag when their names match"""

    __slots__ = ("_name", "_color")

    def __init__(self, name: str, color: str = ""):
        self._name = require_text(name, "tag name")
        self._color = color or ""

    @property
    def name(self) -> str:
        return self._name

    @property
    def color(self) -> str:
        return self._color

    def with_color(self, color: str) -> "Tag":
        return Tag(self._name, color)

    def __eq__(self, other):
        if not isinstance(other, Tag):
            return NotImplemented
        return self._name == other._name

    def __hash__(self):
        return hash(self._name)

    def __repr__(self):
        return f"<Tag(name='{self._name}', color='{self._color}')>"

    def to_dict(self):
        return {"name": self._name, "color": self._color}
