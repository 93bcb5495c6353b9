from datetime import date
import pytest
from contestjudge.errors import ValidationError
from contestjudge.models.contest import Category
from contestjudge.schemas.metadata import CoffeeMetadata, LivestockMetadata, load_metadata, parse_metadata
from contestjudge.services.submissions import check_category_filters


def test_kind_defaults_to_contest_type():
    meta = parse_metadata("COFFEE_PRODUCTS", {"variety": "Geisha", "altitude": 1800})
    assert isinstance(meta, CoffeeMetadata)
    assert meta.altitude == 1800


def test_empty_metadata_is_valid():
    meta = parse_metadata("LIVESTOCK", None)
    assert isinstance(meta, LivestockMetadata)


def test_mismatched_kind_rejected():
    with pytest.raises(ValidationError):
        parse_metadata("LIVESTOCK", {"kind": "COFFEE_PRODUCTS"})


def test_field_errors_become_validation_errors():
    with pytest.raises(ValidationError) as e:
        parse_metadata("LIVESTOCK", {"weight": -3})
    assert "weight" in e.value.detail


def test_expiry_before_production_rejected():
    with pytest.raises(ValidationError):
        parse_metadata("GENERAL_PRODUCTS", {"productionDate": "2026-03-01", "expiryDate": "2026-02-01"})


def test_stored_metadata_round_trips():
    meta = parse_metadata("GENERAL_PRODUCTS", {"productionDate": "2026-03-01", "ingredients": ["milk"]})
    again = load_metadata(meta.model_dump(mode="json"))
    assert again.production_date == date(2026, 3, 1)
    assert load_metadata({}) is None


def test_category_filters():
    cat = Category(name="Heifers", age_min=12, age_max=24, sex="female", weight_max=600)
    check_category_filters(cat, LivestockMetadata(age=18, sex="Female", weight=450))
    with pytest.raises(ValidationError):
        check_category_filters(cat, LivestockMetadata(age=30))
    with pytest.raises(ValidationError):
        check_category_filters(cat, LivestockMetadata(sex="male"))
    with pytest.raises(ValidationError):
        check_category_filters(cat, LivestockMetadata(weight=700))
    # Product metadata is not subject to livestock filters
    check_category_filters(cat, CoffeeMetadata())
