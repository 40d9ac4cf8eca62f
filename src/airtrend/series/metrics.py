"""
Catalogue of the metric channels the dashboard charts.

Each channel is transformed independently from the same raw fetch, so a
channel with missing readings never removes points from another one.
"""

from typing import Dict, List

from ..models.series import MetricSpec

INDEX_METRICS: List[MetricSpec] = [
    MetricSpec(key="aqi", label="Air Quality Index", unit="", precision=0),
]

POLLUTANT_METRICS: List[MetricSpec] = [
    MetricSpec(key="pm25", label="PM2.5", unit="µg/m³", precision=1),
    MetricSpec(key="pm10", label="PM10", unit="µg/m³", precision=1),
    MetricSpec(key="no2", label="NO₂", unit="µg/m³", precision=1),
    MetricSpec(key="so2", label="SO₂", unit="µg/m³", precision=1),
    MetricSpec(key="co", label="CO", unit="mg/m³", precision=1),
    MetricSpec(key="o3", label="O₃", unit="µg/m³", precision=1),
]

WEATHER_METRICS: List[MetricSpec] = [
    MetricSpec(key="temperature", label="Temperature", unit="°C", precision=2),
    MetricSpec(key="humidity", label="Humidity", unit="%", precision=2),
    MetricSpec(key="wind_speed", label="Wind Speed", unit="km/h", precision=2),
    MetricSpec(key="wind_gust", label="Wind Gust", unit="km/h", precision=2),
    MetricSpec(key="precipitation", label="Precipitation Probability", unit="%", precision=2),
    MetricSpec(key="air_pressure", label="Air Pressure", unit="hPa", precision=2),
]

METRIC_CATALOGUE: Dict[str, MetricSpec] = {
    spec.key: spec for spec in INDEX_METRICS + POLLUTANT_METRICS + WEATHER_METRICS
}


def get_metric_spec(metric_key: str) -> MetricSpec:
    """
    Look up a metric; unknown keys get a generic spec with integer rounding.
    """
    spec = METRIC_CATALOGUE.get(metric_key)
    if spec is None:
        return MetricSpec(key=metric_key, label=metric_key, precision=0)
    return spec
