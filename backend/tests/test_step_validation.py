"""Unit tests for the pure step validators."""

import pytest

from app.i18n import translate
from app.schemas.common import WizardType
from app.services.step_validation import (
    WIZARDS,
    completion_percentage,
    get_wizard,
    validate_all_steps,
    validate_step,
)


@pytest.mark.unit
@pytest.mark.wizard
class TestDefinitions:

    def test_every_wizard_has_four_steps(self):
        for definition in WIZARDS.values():
            assert definition.total_steps == 4

    def test_required_steps(self):
        assert get_wizard(WizardType.PROPERTY).required_steps == [1, 2, 3]
        assert get_wizard(WizardType.LAND).required_steps == [1, 2, 3]
        assert get_wizard(WizardType.BLOG).required_steps == [1]

    def test_unknown_step_raises_index_error(self):
        with pytest.raises(IndexError):
            validate_step(WizardType.PROPERTY, 7, {})


@pytest.mark.unit
@pytest.mark.wizard
class TestPropertySteps:

    def test_short_title_reports_min_length(self, property_form):
        ok, errors = validate_step("property", 1, dict(property_form, title="Casa"), "en")

        assert ok is False
        assert errors == {"title": "Must be at least 10 characters"}

    def test_price_must_be_positive(self, property_form):
        ok, errors = validate_step("property", 1, dict(property_form, price=0), "es")

        assert ok is False
        assert errors["price"] == "Debe ser mayor a 0"

    def test_bounds_render_without_float_noise(self):
        assert translate("greater_than", "es", gt=0.0) == "Debe ser mayor a 0"
        assert translate("less_than_equal", "en", le=999999999.0) == "Must be at most 999999999"
        assert translate("greater_than_equal", "en", ge=17.5) == "Must be at least 17.5"

    def test_markup_in_title_is_rejected(self, property_form):
        ok, errors = validate_step(
            "property", 1, dict(property_form, title="<script>alert(1)</script> Casa en venta"), "es"
        )

        assert ok is False
        assert errors == {"title": "Contiene contenido no permitido"}

    def test_unknown_property_type(self, property_form):
        ok, errors = validate_step("property", 1, dict(property_form, property_type="castle"))

        assert ok is False
        assert "property_type" in errors

    def test_at_least_one_characteristic(self, property_form):
        ok, errors = validate_step("property", 1, dict(property_form, characteristics=[]))

        assert ok is False
        assert "characteristics" in errors

    def test_media_requires_an_image(self, property_form):
        ok, errors = validate_step("property", 3, dict(property_form, images=[]))

        assert ok is False
        assert "images" in errors

    def test_media_rejects_oversized_or_foreign_images(self, property_form):
        bad = dict(property_form["images"][0], size=11 * 1024 * 1024, content_type="image/gif")
        ok, errors = validate_step("property", 3, dict(property_form, images=[bad]))

        assert ok is False
        assert "images.0.size" in errors
        assert "images.0.content_type" in errors

    def test_other_steps_keys_are_ignored(self, property_form):
        ok, errors = validate_step("property", 2, property_form)

        assert ok is True
        assert errors == {}


@pytest.mark.unit
@pytest.mark.wizard
class TestLandAndBlogSteps:

    def test_valid_land_passes_every_step(self, land_form):
        is_valid, errors = validate_all_steps(WizardType.LAND, land_form)

        assert is_valid == {1: True, 2: True, 3: True, 4: True}
        assert errors == {}

    def test_land_location_text_required(self, land_form):
        form = {k: v for k, v in land_form.items() if k != "location"}
        ok, errors = validate_step(WizardType.LAND, 2, form)

        assert ok is False
        assert "location" in errors

    def test_land_seo_limits(self, land_form):
        ok, errors = validate_step(WizardType.LAND, 4, dict(land_form, seo_title="x" * 61))

        assert ok is False
        assert "seo_title" in errors

    def test_blog_only_needs_content_step(self, blog_form):
        is_valid, _ = validate_all_steps(WizardType.BLOG, blog_form)

        assert all(is_valid.values())

    def test_blog_slug_pattern(self, blog_form):
        ok, errors = validate_step(WizardType.BLOG, 3, dict(blog_form, slug="Mi Slug!"))

        assert ok is False
        assert "slug" in errors

    def test_blog_category_enum(self, blog_form):
        ok, errors = validate_step(WizardType.BLOG, 1, dict(blog_form, category="gossip"), "en")

        assert ok is False
        assert errors["category"] == "Select a valid option"


@pytest.mark.unit
@pytest.mark.wizard
class TestCompletionPercentage:

    def test_empty_form_is_zero(self):
        assert completion_percentage(WizardType.BLOG, {}) == 0

    def test_full_form_is_hundred(self, blog_form):
        assert completion_percentage(WizardType.BLOG, blog_form) == 100

    def test_partial_counts_filled_fields(self):
        # 1 of 3 required blog fields
        assert completion_percentage(WizardType.BLOG, {"title": "Hola mundo"}) == 33
