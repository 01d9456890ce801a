"""Tests for the quarterly condition image rules (domain/condition_images.py)."""

from datetime import date

import pytest

from asset_kernel.domain.condition_images import (
    MAX_IMAGES_PER_QUARTER,
    Quarter,
    can_upload_more,
    is_hardware_category,
)
from asset_kernel.domain.lifecycle import CategoryKind


class TestQuarter:

    @pytest.mark.parametrize("day, expected", [
        (date(2024, 1, 1), Quarter(2024, 1)),
        (date(2024, 3, 31), Quarter(2024, 1)),
        (date(2024, 4, 1), Quarter(2024, 2)),
        (date(2024, 9, 30), Quarter(2024, 3)),
        (date(2024, 12, 31), Quarter(2024, 4)),
    ])
    def test_calendar_quarters(self, day, expected):
        assert Quarter.of(day) == expected

    def test_ordering_crosses_years(self):
        assert Quarter(2023, 4) < Quarter(2024, 1) < Quarter(2024, 2)

    def test_str(self):
        assert str(Quarter(2024, 3)) == "2024 Q3"


class TestHardwareCategories:

    @pytest.mark.parametrize("name", ["Laptop", "Monitor", "Docking Station", "Mobile Phone"])
    def test_physical_categories(self, name):
        assert is_hardware_category(name, CategoryKind.REGULAR)

    @pytest.mark.parametrize("name", [
        "Software",
        "Office License",
        "SaaS subscription",
        "SOFTWARE LICENSES",
    ])
    def test_software_like_names(self, name):
        assert not is_hardware_category(name, CategoryKind.REGULAR)

    def test_virtual_machines(self):
        assert not is_hardware_category("Virtual Machine", "virtual_machine")


def test_cap():
    assert can_upload_more(MAX_IMAGES_PER_QUARTER - 1)
    assert not can_upload_more(MAX_IMAGES_PER_QUARTER)
    assert not can_upload_more(2, limit=2)
