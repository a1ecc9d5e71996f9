"""Label model: label pairs, validated label sets and label token parsing."""
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from omb_remote_write.errors import DuplicateLabelName, LabelParseError

METRIC_NAME_LABEL = "__name__"


@dataclass(frozen=True)
class Label:
    """A single name/value label pair."""
    name: str
    value: str


LabelSet = Tuple[Label, ...]


class LabelSetBuilder:
    """Accumulates labels in order and rejects repeated names."""

    def __init__(self):
        self._labels: List[Label] = []
        self._seen = set()

    def add(self, name: str, value: str) -> "LabelSetBuilder":
        """Append a label, failing fast if its name is already present."""
        if name in self._seen:
            raise DuplicateLabelName(name)
        self._seen.add(name)
        self._labels.append(Label(name, value))
        return self

    def extend(self, labels: Iterable[Label]) -> "LabelSetBuilder":
        for label in labels:
            self.add(label.name, label.value)
        return self

    def build(self) -> LabelSet:
        return tuple(self._labels)


def build_label_set(metric_name: str, additional_labels: Iterable[Label] = ()) -> LabelSet:
    """
    Build the label set identifying one metric series.

    The metric name always comes first under the reserved ``__name__`` key,
    followed by the additional labels in the order they were supplied.

    Raises:
        DuplicateLabelName: if an additional label repeats a name
    """
    return (
        LabelSetBuilder()
        .add(METRIC_NAME_LABEL, metric_name)
        .extend(additional_labels)
        .build()
    )


def parse_label_pairs(text: str) -> List[Label]:
    """
    Parse comma-separated ``name:value`` tokens into labels.

    An empty string means no labels. The value is everything after the first
    colon, so ``url:http://host`` keeps its full value.

    Raises:
        LabelParseError: if a token has no colon or an empty name
    """
    if not text or not text.strip():
        return []

    labels = []
    for token in text.split(","):
        name, sep, value = token.partition(":")
        name = name.strip()
        if not sep:
            raise LabelParseError(f"label '{token}' is not of the form name:value")
        if not name:
            raise LabelParseError(f"label '{token}' has an empty name")
        labels.append(Label(name, value.strip()))

    return labels


def label_key(labels: LabelSet) -> str:
    """Generate a stable key from sorted labels."""
    items = sorted((label.name, label.value) for label in labels)
    return ",".join(f"{k}={v}" for k, v in items)
