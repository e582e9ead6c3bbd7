from allertify.application.services.allergen_service import seed_standard_allergens
from allertify.infrastructure.repositories.allergen_repository import SQLAlchemyAllergenRepository

API = "/api/v1"


def test_allergen_catalog(client, db, user_headers):
    seed_standard_allergens(SQLAlchemyAllergenRepository(db))

    names = [a["name"] for a in client.get(f"{API}/allergens", headers=user_headers).json()]
    assert len(names) == 9
    assert "Peanuts" in names


def test_user_allergens_are_replaced(client, user_headers):
    client.put(
        f"{API}/users/me/allergens",
        json={"allergens": [{"name": "Milk"}, {"name": "Durian", "securityLevel": 2, "isCustom": True}]},
        headers=user_headers,
    )
    response = client.put(
        f"{API}/users/me/allergens",
        json={"allergens": [{"name": "Durian", "securityLevel": 4, "isCustom": True}]},
        headers=user_headers,
    )
    assert response.status_code == 200

    mine = client.get(f"{API}/users/me/allergens", headers=user_headers).json()
    assert [(a["name"], a["securityLevel"]) for a in mine] == [("Durian", 4)]


def test_security_level_is_validated(client, user_headers):
    response = client.put(
        f"{API}/users/me/allergens",
        json={"allergens": [{"name": "Milk", "securityLevel": 9}]},
        headers=user_headers,
    )
    assert response.status_code == 400


def test_only_admins_create_plans(client, user_headers, admin_headers):
    body = {"name": "FAMILY", "scanCountLimit": 300, "savedProductLimit": 50}

    assert client.post(f"{API}/subscriptions/plans", json=body, headers=user_headers).status_code == 403

    created = client.post(f"{API}/subscriptions/plans", json=body, headers=admin_headers)
    assert created.status_code == 201
    assert created.json()["scanCountLimit"] == 300

    duplicate = client.post(f"{API}/subscriptions/plans", json=body, headers=admin_headers)
    assert duplicate.status_code == 422


def test_subscription_raises_daily_limit(client, user_headers, admin_headers):
    plan = client.post(
        f"{API}/subscriptions/plans",
        json={"name": "PREMIUM", "scanCountLimit": 500, "savedProductLimit": 200},
        headers=admin_headers,
    ).json()

    assert client.get(f"{API}/subscriptions/me", headers=user_headers).status_code == 404

    response = client.post(f"{API}/subscriptions", json={"tierPlanId": plan["id"], "durationMonths": 1}, headers=user_headers)
    assert response.status_code == 201
    assert response.json()["status"] == "ACTIVE"
    assert response.json()["tierPlan"]["name"] == "PREMIUM"

    mine = client.get(f"{API}/subscriptions/me", headers=user_headers).json()
    assert mine["tierPlanId"] == plan["id"]

    limit = client.get(f"{API}/scans/limit", headers=user_headers).json()
    assert limit["dailyLimit"] == 500


def test_subscribing_to_unknown_plan_is_404(client, user_headers):
    response = client.post(f"{API}/subscriptions", json={"tierPlanId": 42}, headers=user_headers)
    assert response.status_code == 404
