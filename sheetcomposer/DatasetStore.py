# DatasetStore - Chart datasets attached to a chart node
#
# A ChartConfig holds the axis labels, the value range and an ordered
# list of Datasets.  The store is the only thing that mutates it, and
# after every mutation each dataset's series has exactly one value per
# label (longer series are cut, shorter ones padded with zeros).
#
# The charting capability needs at least MIN_LABELS axes, so the
# render request pads the label set with placeholders instead of
# refusing to draw.

import copy
import re

MIN_LABELS = 3
DEFAULT_MIN = 0
DEFAULT_MAX = 100


class Dataset:
    __slots__ = ("label", "series", "line_color", "fill_color",
                 "fill_alpha", "show_points", "visible")

    def __init__(self, label="Data", series=(), line_color="#0ea5e9",
                 fill_color="#0ea5e9", fill_alpha=0.25, show_points=True,
                 visible=True):
        self.label = label
        self.series = [float(v) for v in series]
        self.line_color = line_color
        self.fill_color = fill_color
        self.fill_alpha = fill_alpha
        self.show_points = show_points
        self.visible = visible

    def __repr__(self):
        return "<Dataset {!r} {} {}>".format(
            self.label, self.series, "" if self.visible else "hidden")


class ChartConfig:
    """Labels, value range and datasets of a radar chart."""

    __slots__ = ("labels", "min", "max", "datasets")

    def __init__(self, labels=(), min=DEFAULT_MIN, max=DEFAULT_MAX,
                 datasets=()):
        self.labels = list(labels)
        self.min = min
        self.max = max
        self.datasets = list(datasets)

    def value_range(self):
        """Return (min, max) with min < max guaranteed."""
        lo, hi = float(self.min), float(self.max)
        if not hi > lo:
            hi = lo + 1
        return lo, hi


# ----------------------------------------------------------------------
# Reconciliation
# ----------------------------------------------------------------------
def reconcile(series, count):
    """Cut or zero-pad series to exactly count values."""
    result = list(series[:count])
    result.extend([0.0] * (count - len(result)))
    return result


def placeholder_labels(labels, minimum=MIN_LABELS):
    """Return labels padded with numbered placeholders up to minimum."""
    result = list(labels)
    while len(result) < minimum:
        result.append("#{}".format(len(result) + 1))
    return result


# ----------------------------------------------------------------------
# Form parsing
# ----------------------------------------------------------------------
def parse_labels(text):
    """One label per line; blank lines are dropped."""
    return [s.strip() for s in re.split(r"\r?\n", text or "") if s.strip()]


def parse_values(text):
    """Comma separated numbers; anything unparsable becomes 0."""
    values = []
    for part in (text or "").split(","):
        try:
            value = float(part.strip())
        except ValueError:
            value = 0.0
        if value != value:
            value = 0.0
        values.append(value)
    return values


class DatasetStore:
    """Owns a ChartConfig and keeps its series reconciled.

    Also remembers which dataset the user picked in the dataset list.
    The pick is cleared whenever a dataset is added or removed, so a
    stale index can never point at a different dataset.
    """

    def __init__(self, config=None):
        self.config = config if config is not None else ChartConfig()
        self._selected = None
        self.reconcile_all()

    # ---- queries ----------------------------------------------------------

    @property
    def labels(self):
        return list(self.config.labels)

    @property
    def datasets(self):
        return list(self.config.datasets)

    @property
    def selected_index(self):
        return self._selected

    def __len__(self):
        return len(self.config.datasets)

    def copy(self):
        """Independent store with the same config and pick."""
        other = DatasetStore(copy.deepcopy(self.config))
        other._selected = self._selected
        return other

    # ---- mutation ---------------------------------------------------------

    def add_dataset(self, dataset):
        dataset.series = reconcile(dataset.series, len(self.config.labels))
        self.config.datasets.append(dataset)
        self._selected = None
        return len(self.config.datasets) - 1

    def remove_dataset(self, index):
        if not 0 <= index < len(self.config.datasets):
            return False
        del self.config.datasets[index]
        self._selected = None
        return True

    def remove_selected(self):
        if self._selected is None:
            return False
        return self.remove_dataset(self._selected)

    def toggle_visible(self, index):
        if not 0 <= index < len(self.config.datasets):
            return False
        ds = self.config.datasets[index]
        ds.visible = not ds.visible
        return True

    def select(self, index):
        if index is not None and not 0 <= index < len(self.config.datasets):
            index = None
        self._selected = index

    def update_all(self, labels, value_min, value_max):
        """Replace labels and range, then reconcile every series."""
        self.config.labels = list(labels)
        self.config.min = value_min
        self.config.max = value_max
        self.reconcile_all()

    def reconcile_all(self):
        count = len(self.config.labels)
        for ds in self.config.datasets:
            ds.series = reconcile(ds.series, count)

    # ---- rendering --------------------------------------------------------

    def render_request(self):
        """Build the input handed to the charting capability.

        Returns:
            dict with "labels" (padded to MIN_LABELS), "min", "max" and
            the visible "datasets", their series matched to the labels.
        """
        labels = placeholder_labels(self.config.labels)
        lo, hi = self.config.value_range()
        datasets = []
        for ds in self.config.datasets:
            if not ds.visible:
                continue
            datasets.append(Dataset(
                ds.label, reconcile(ds.series, len(labels)),
                ds.line_color, ds.fill_color, ds.fill_alpha,
                ds.show_points, True))
        return {"labels": labels, "min": lo, "max": hi,
                "datasets": datasets}
