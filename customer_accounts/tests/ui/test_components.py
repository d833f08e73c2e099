"""Tests for the presentation macros and their helpers."""

import uuid
from datetime import datetime, timezone

import pytest

from customer_accounts.client import CustomerRecord
from customer_accounts.ui import components


@pytest.fixture(scope="module")
def env():
    return components.build_environment()


def _record(**overrides):
    data = {
        "account_id": uuid.uuid4(),
        "first_name": "Jane",
        "last_name": "Smith",
        "email": "jane.smith@example.com",
        "phone_number": None,
        "address": None,
        "city": "Boston",
        "state": None,
        "country": "USA",
        "date_created": datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return CustomerRecord(**data)


class TestHelpers:
    def test_full_name(self):
        assert components.full_name(_record()) == "Jane Smith"

    def test_display_date(self):
        assert components.display_date(datetime(2024, 1, 15, 10, 30)) == "January 15, 2024, 10:30 AM"
        assert components.display_date("2024-03-02T15:05:00") == "March 02, 2024, 03:05 PM"
        assert components.display_date(None) == ""

    def test_location_parts_skip_missing(self):
        assert components.location_parts(_record()) == ["Boston", "USA"]

    def test_form_values_from_record(self):
        values = components.form_values(_record())
        assert values["first_name"] == "Jane"
        assert values["phone_number"] == ""
        assert set(values) == set(components.FIELD_NAMES)

    def test_submitted_values_win(self):
        values = components.form_values(_record(), submitted={"first_name": "Janet", "city": ""})
        assert values["first_name"] == "Janet"
        assert values["city"] == ""
        assert values["last_name"] == "Smith"

    def test_form_fields_follow_rules(self):
        by_name = {field.name: field for field in components.FORM_FIELDS}
        assert by_name["email"].input_type == "email"
        assert by_name["phone_number"].input_type == "tel"
        assert by_name["first_name"].required
        assert not by_name["city"].required
        assert by_name["address"].max_length == 255


class TestCustomerTable:
    def test_rows(self, env):
        record = _record()
        html = components.render_component(env, "customer_table.html", "customer_table", [record])
        assert "Jane Smith" in html
        assert "Boston, USA" in html
        assert "January 15, 2024, 10:30 AM" in html
        assert f'/customers/{record.account_id}/edit' in html
        assert f'action="/customers/{record.account_id}/delete"' in html

    def test_empty_state(self, env):
        html = components.render_component(env, "customer_table.html", "customer_table", [])
        assert "No customers yet" in html

    def test_escapes_values(self, env):
        html = components.render_component(
            env, "customer_table.html", "customer_table", [_record(first_name="<script>")]
        )
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_delete_confirmation_is_attribute_only(self, env):
        html = components.render_component(
            env, "customer_table.html", "customer_table", [_record(first_name="x');alert(1);//")]
        )
        assert "onsubmit" not in html
        assert 'data-confirm="Delete x&#39;);alert(1);// Smith?"' in html


class TestCustomerForm:
    def test_renders_all_fields_with_errors(self, env):
        values = components.form_values(submitted={"first_name": "", "email": "bad"})
        html = components.render_component(
            env,
            "customer_form.html",
            "customer_form",
            values,
            {"first_name": "First name is required"},
            "/customers/new",
            "Create Customer",
            form_error="Customer with email bad already exists",
        )
        for name in components.FIELD_NAMES:
            assert f'name="{name}"' in html
        assert "First name is required" in html
        assert 'value="bad"' in html
        assert "Customer with email bad already exists" in html
        assert "Create Customer" in html


class TestFeedback:
    def test_loading_spinner(self, env):
        html = components.render_component(env, "feedback.html", "loading_spinner", "Loading customers...")
        assert "Loading customers..." in html

    def test_error_message_with_retry(self, env):
        html = components.render_component(
            env, "feedback.html", "error_message", "Failed to load customers", "Network error", retry_url="/"
        )
        assert "Failed to load customers" in html
        assert "Retry" in html

    def test_error_message_without_retry(self, env):
        html = components.render_component(env, "feedback.html", "error_message", "Customer not found", "Gone")
        assert "Retry" not in html
