import pytest

from fundraise.config.settings import Settings
from fundraise.data.build_catalog import build_catalog_report, load_catalog
from fundraise.engine.catalog import Catalog
from fundraise.engine.errors import ConfigurationError
from fundraise.engine.models import Product, Tier

PRODUCTS = "id,name,description,cost,price,image\nmug,Mug,,3,10,\n"


def make_settings(tmp_path, products=PRODUCTS, tiers=None):
    products_csv = tmp_path / "products.csv"
    tiers_csv = tmp_path / "tiers.csv"
    products_csv.write_text(products, encoding="utf-8")
    if tiers is not None:
        tiers_csv.write_text(tiers, encoding="utf-8")
    return Settings(project_root=tmp_path, products_csv=products_csv, tiers_csv=tiers_csv)


def test_packaged_catalog(catalog):
    assert catalog.ids() == ["coffret", "gourde", "bougie"]

    gourde = catalog["gourde"]
    assert gourde.cost == 6 and gourde.price == 15
    assert [t.min_volume for t in gourde.tiers] == [0, 150, 400]
    assert gourde.tiers[1].group == 6.5


def test_packaged_tiers_fit_margin_pool(catalog):
    for product in catalog:
        assert product.price > product.cost
        assert product.inconsistent_tiers() == [], f"{product.id} hands out more than its margin"


def test_load_catalog_from_files(tmp_path):
    settings = make_settings(tmp_path, tiers="product_id,min,platform,group\nmug,0,2,4\nmug,50,1.5,4.5\n")
    catalog = load_catalog(settings)

    assert len(catalog) == 1
    assert catalog["mug"].tiers[1] == Tier(50, 1.5, 4.5)
    assert catalog["mug"].description == ""


def test_missing_zero_floor_tier_is_fatal(tmp_path):
    settings = make_settings(tmp_path, tiers="product_id,min,platform,group\nmug,10,2,4\n")
    with pytest.raises(ConfigurationError, match="volume 0"):
        load_catalog(settings)


def test_duplicate_threshold_is_fatal(tmp_path):
    settings = make_settings(tmp_path, tiers="product_id,min,platform,group\nmug,0,2,4\nmug,0,1,5\n")
    with pytest.raises(ConfigurationError, match="duplicate"):
        load_catalog(settings)


def test_product_without_tiers_is_fatal(tmp_path):
    settings = make_settings(tmp_path, tiers="product_id,min,platform,group\n")
    with pytest.raises(ConfigurationError, match="no tiers"):
        load_catalog(settings)


def test_tiers_for_unknown_product_are_fatal(tmp_path):
    settings = make_settings(tmp_path, tiers="product_id,min,platform,group\nmug,0,2,4\ncup,0,1,1\n")
    with pytest.raises(ConfigurationError, match="cup"):
        load_catalog(settings)


def test_fractional_threshold_is_fatal(tmp_path):
    settings = make_settings(tmp_path, tiers="product_id,min,platform,group\nmug,0,2,4\nmug,10.5,1,5\n")
    with pytest.raises(ConfigurationError, match="whole number"):
        load_catalog(settings)


def test_missing_file_is_fatal(tmp_path):
    settings = make_settings(tmp_path)
    with pytest.raises(ConfigurationError, match="not found"):
        load_catalog(settings)


def test_missing_column_is_fatal(tmp_path):
    settings = make_settings(tmp_path, tiers="product_id,min,platform\nmug,0,2\n")
    with pytest.raises(ConfigurationError, match="group"):
        load_catalog(settings)


def test_duplicate_product_id_is_fatal():
    tiers = (Tier(0, 1, 1),)
    with pytest.raises(ConfigurationError, match="Duplicate"):
        Catalog([Product("a", "A", 1, 5, tiers), Product("a", "A2", 1, 5, tiers)])


def test_report_flags_tiers_exceeding_margin_pool(tmp_path):
    settings = make_settings(tmp_path, tiers="product_id,min,platform,group\nmug,0,5,4\n")
    report = build_catalog_report(settings, verbose=False)

    assert report["status"] == "success"
    assert report["metrics"]["product_count"] == 1
    assert any("mug" in w for w in report["warnings"])


def test_report_on_broken_catalog(tmp_path):
    settings = make_settings(tmp_path, tiers="product_id,min,platform,group\nmug,5,1,1\n")
    report = build_catalog_report(settings, verbose=False)

    assert report["status"] == "failed"
    assert report["errors"]
