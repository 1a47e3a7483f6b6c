from io import BytesIO

import pandas as pd
import pytest


REFERENCE_INPUTS = {
    "admins": 2,
    "directors": 10,
    "avgAnnualSurvey": 150000,
    "meetingsPerYear": 24,
    "saasMonthly": 2000,
}


def test_index_renders_locked_page(client):
    response = client.get("/")
    body = response.get_data(as_text=True)
    assert response.status_code == 200
    assert "Meeting ROI Calculator" in body
    assert 'Click "Calculate ROI" to see results' in body
    assert 'name="saasMonthly"' not in body
    assert "replaceState" not in body


def test_completion_marker_unlocks_and_cleans_address(client):
    response = client.get("/?session_id=abc123")
    body = response.get_data(as_text=True)
    assert response.status_code == 200
    assert 'window.history.replaceState({}, \'\', "/")' in body
    assert 'name="saasMonthly"' in body

    with client.session_transaction() as sess:
        assert sess["roiCalculatorAccess"] == "true"
        assert sess.permanent

    assert client.get("/api/access").get_json() == {"success": True, "hasAccess": True}


def test_stored_flag_unlocks_without_marker(unlocked_client):
    body = unlocked_client.get("/").get_data(as_text=True)
    assert 'name="saasMonthly"' in body
    assert "replaceState" not in body


def test_access_api_reports_locked(client):
    assert client.get("/api/access").get_json() == {"success": True, "hasAccess": False}


def test_calculate_api_locked(client):
    response = client.post("/api/calculate", json=REFERENCE_INPUTS)
    data = response.get_json()
    assert response.status_code == 200
    assert data["success"]
    assert data["calculations"] == {
        "totalAdminCost": pytest.approx(43200.0),
        "totalDirectorCost": pytest.approx(108000.0),
        "totalMeetingCost": pytest.approx(151200.0),
        "totalAnnualCost": pytest.approx(151200.0),
    }
    assert data["formatted"]["totalAnnualCost"] == "$151,200"


def test_calculate_api_unlocked(unlocked_client):
    data = unlocked_client.post("/api/calculate", json=REFERENCE_INPUTS).get_json()
    assert data["calculations"]["saasAnnualCost"] == 24000
    assert data["calculations"]["savings"] == pytest.approx(127200.0)
    assert data["formatted"]["savings"] == "$127,200"


def test_calculate_api_coerces_bad_input(client):
    data = client.post("/api/calculate", json={"admins": "", "directors": "abc"}).get_json()
    assert data["inputs"]["admins"] == 1
    assert data["inputs"]["directors"] == 1
    assert data["inputs"]["meetingsPerYear"] == 24


def test_calculate_api_without_body_uses_defaults(client):
    data = client.post("/api/calculate").get_json()
    assert data["calculations"]["totalAnnualCost"] == pytest.approx(151200.0)


def test_calculate_form_renders_results(client):
    response = client.post("/", data={key: str(value) for key, value in REFERENCE_INPUTS.items()})
    body = response.get_data(as_text=True)
    assert "$43,200" in body
    assert "$108,000" in body
    assert "$151,200" in body
    assert "Annual Savings with OnBoard" not in body
    assert "Unlock Savings Calculator - $29" in body


def test_calculate_form_shows_savings_when_unlocked(unlocked_client):
    form = {key: str(value) for key, value in REFERENCE_INPUTS.items()}
    body = unlocked_client.post("/", data=form).get_data(as_text=True)
    assert "Annual Savings with OnBoard" in body
    assert "$127,200" in body
    assert "Monthly SaaS Cost: $2,000" in body
    assert "Unlock Savings Calculator" not in body


def test_checkout_page_redirects_to_provider(app, client, fake_checkout):
    app.extensions["checkout_client"] = fake_checkout
    response = client.post("/checkout", data={"admins": "3"})
    assert response.status_code == 303
    assert response.headers["Location"] == fake_checkout.url
    assert fake_checkout.calls == ["price_test_29"]

    with client.session_transaction() as sess:
        assert "roiCalculatorAccess" not in sess


def test_checkout_page_failure_alerts_and_keeps_inputs(app, client, failing_checkout):
    app.extensions["checkout_client"] = failing_checkout
    response = client.post("/checkout", data={"admins": "3", "directors": "10"})
    body = response.get_data(as_text=True)
    assert response.status_code == 200
    assert 'alert("Failed to start checkout. Please try again.")' in body
    assert 'id="admins" name="admins" type="number" min="1" value="3"' in body
    assert client.get("/api/access").get_json()["hasAccess"] is False


def test_checkout_api_returns_url(app, client, fake_checkout):
    app.extensions["stripe_checkout_client"] = fake_checkout
    response = client.post("/api/checkout", json={"priceId": "price_29"})
    assert response.status_code == 200
    assert response.get_json() == {"url": fake_checkout.url}


def test_checkout_api_requires_price(client):
    response = client.post("/api/checkout", json={})
    assert response.status_code == 400
    assert response.get_json()["success"] is False


def test_checkout_api_provider_failure(app, client, failing_checkout):
    app.extensions["stripe_checkout_client"] = failing_checkout
    response = client.post("/api/checkout", json={"priceId": "price_29"})
    assert response.status_code == 502
    assert response.get_json() == {"success": False, "error": "card declined"}


def test_checkout_api_unexpected_error(app, client):
    class BrokenClient:
        def create_session(self, price_id):
            raise RuntimeError("boom")

    app.extensions["stripe_checkout_client"] = BrokenClient()
    response = client.post("/api/checkout", json={"priceId": "price_29"})
    assert response.status_code == 500
    assert response.get_json()["error"] == "boom"


def test_download_analysis_workbook(unlocked_client):
    response = unlocked_client.post("/api/download-analysis", json=REFERENCE_INPUTS)
    assert response.status_code == 200
    assert response.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    assert "Meeting_ROI_" in response.headers["Content-Disposition"]

    summary = pd.read_excel(BytesIO(response.data), sheet_name="Summary")
    values = dict(zip(summary["Metric"], summary["Value"]))
    assert values["Total Annual Cost"] == pytest.approx(151200.0)
    assert values["Annual Savings"] == pytest.approx(127200.0)


def test_oversized_form_value_falls_back_to_minimum(client):
    response = client.post("/", data={"admins": "1" * 5000})
    body = response.get_data(as_text=True)
    assert response.status_code == 200
    assert 'id="admins" name="admins" type="number" min="1" value="1"' in body


def test_oversized_json_value_falls_back_to_minimum(client):
    data = client.post("/api/calculate", json={"admins": "1" * 5000}).get_json()
    assert data["success"]
    assert data["inputs"]["admins"] == 1
