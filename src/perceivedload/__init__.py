from perceivedload.analysis.average import average, averages, trailing_averages
from perceivedload.domain.record import Record
from perceivedload.domain.series import SeriesView, TimeSeries
from perceivedload.io.csv_store import read_series, write_series

__version__ = "0.1.0"

__all__ = [
    "Record",
    "SeriesView",
    "TimeSeries",
    "average",
    "averages",
    "read_series",
    "trailing_averages",
    "write_series",
]
