from datetime import datetime

from bson import ObjectId


def test_dashboard(client, auth_headers, api_seeder, run):
    boarder = run(api_seeder.boarder(seat_rent=500))
    run(api_seeder.full_month(boarder, 2025, 6, days=30))
    run(api_seeder.expense(4500, datetime(2025, 6, 1)))
    run(api_seeder.payment(boarder, 5000, datetime(2025, 6, 1)))

    response = client.get("/api/v1/reports/dashboard", params={"month": 6, "year": 2025}, headers=auth_headers())

    assert response.status_code == 200
    body = response.json()
    assert body["total_boarders"] == 1
    assert body["total_due"] == 0
    assert body["collection_rate"] == 100


def test_boarder_dashboard(client, auth_headers, api_seeder, run):
    user_id = ObjectId()
    boarder = run(api_seeder.boarder(user_id=user_id, seat_rent=300))
    run(api_seeder.payment(boarder, 100, datetime(2025, 6, 1), method="nagad"))

    response = client.get(
        "/api/v1/reports/boarder-dashboard",
        params={"month": 6, "year": 2025},
        headers=auth_headers("boarder", user_id=user_id)
    )

    assert response.status_code == 200
    body = response.json()
    assert body["statement"]["due"] == 200.0
    assert body["recent_payments"][0]["method"] == "nagad"


def test_monthly_summary_and_expense_summary(client, auth_headers, api_seeder, run):
    run(api_seeder.boarder(seat_rent=100))
    run(api_seeder.expense(700, datetime(2025, 6, 2), category="utilities"))
    admin = auth_headers()

    response = client.get("/api/v1/reports/monthly-summary", params={"month": 6, "year": 2025}, headers=admin)
    assert response.status_code == 200
    assert response.json()["total_expense"] == 700
    assert response.json()["total_boarders"] == 1

    response = client.get("/api/v1/expenses/summary", params={"month": 6, "year": 2025}, headers=admin)
    assert response.status_code == 200
    assert response.json()["category_breakdown"] == [{"key": "utilities", "total": 700, "count": 1}]
    assert response.json()["daily_breakdown"][0]["key"] == "2025-06-02"


def test_payment_endpoints(client, auth_headers, api_seeder, run):
    boarder = run(api_seeder.boarder())
    admin = auth_headers()

    response = client.post(
        "/api/v1/payments",
        json={"boarder_id": str(boarder.id), "date": "2025-06-05", "amount": 1200, "method": "bank_transfer"},
        headers=admin
    )
    assert response.status_code == 201
    payment = response.json()

    response = client.put(f"/api/v1/payments/{payment['id']}", json={"amount": 1300}, headers=admin)
    assert response.status_code == 200
    assert response.json()["amount"] == 1300

    response = client.post(
        "/api/v1/payments",
        json={"boarder_id": str(boarder.id), "date": "2025-06-05", "amount": 10},
        headers=auth_headers("manager")
    )
    assert response.status_code == 403
