import pytest

from data_loader import build_dataset, read_metrics_table

CSV_TEXT = """iso2,country_name,derviw,idfdv,wass,digital_context,visual_impairment_female,visual_impairment_male
ES,Spain,0.8,0.41,2.5,0.62,"1,200",1000
DE,Germany,0.3,0.77,1.1,0.81,900,0
IT,Italy,,0.55,NA,0.58,500,
PL,Poland,0.5,0.60,1.9,,700,800
"""


def _square(x, y):
    return {"type": "Polygon", "coordinates": [[[x, y], [x + 1, y], [x + 1, y + 1], [x, y + 1], [x, y]]]}


def make_geojson(codes):
    return {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {"ISO2": c, "NAME": c}, "geometry": _square(i * 2, 40)}
            for i, c in enumerate(codes)
        ],
    }


@pytest.fixture
def csv_path(tmp_path):
    p = tmp_path / "country_metrics_public.csv"
    p.write_text(CSV_TEXT, encoding="utf-8")
    return p


@pytest.fixture
def geojson():
    # FR has no metrics row, PL has no shape
    return make_geojson(["ES", "DE", "IT", "FR"])


@pytest.fixture
def frame(csv_path):
    return read_metrics_table(csv_path)


@pytest.fixture
def dataset(frame, geojson):
    return build_dataset(frame, geojson)
