import asyncio
from contextlib import asynccontextmanager

from httpx import ASGITransport, AsyncClient

from portfolio_tracker.api.database import Database
from portfolio_tracker.api.main import create_app
from portfolio_tracker.config import TrackerSettings


def _client(settings: TrackerSettings):
    database = Database(url=settings.database_url)
    app = create_app(database, settings)

    @asynccontextmanager
    async def _manager():
        async with app.router.lifespan_context(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                yield client

    return _manager


def _buy(symbol, quantity, price, on, company="Itausa"):
    return {
        "symbol": symbol,
        "company_name": company,
        "type": "buy",
        "quantity": quantity,
        "price": price,
        "date": on,
    }


def test_health(settings: TrackerSettings):
    client_manager = _client(settings)

    async def _scenario():
        async with client_manager() as api_client:
            response = await api_client.get("/health")
            assert response.status_code == 200
            assert response.json() == {"status": "ok", "service": "portfolio-tracker"}

    asyncio.run(_scenario())


def test_transaction_lifecycle(settings: TrackerSettings):
    client_manager = _client(settings)

    async def _scenario():
        async with client_manager() as api_client:
            created = await api_client.post("/portfolio/transactions", json=_buy("itsa4", 100, 10, "2024-01-10"))
            assert created.status_code == 201
            payload = created.json()
            assert payload["symbol"] == "ITSA4"
            assert payload["total"] == 1000
            assert payload["date"] == "2024-01-10"

            dividend = await api_client.post(
                "/portfolio/transactions",
                json={
                    "symbol": "ITSA4",
                    "company_name": "Itausa",
                    "type": "dividend",
                    "price": 25.0,
                    "date": "2024-03-01",
                },
            )
            assert dividend.status_code == 201
            assert dividend.json()["quantity"] == 0

            listing = await api_client.get("/portfolio/transactions")
            assert [tx["type"] for tx in listing.json()] == ["dividend", "buy"]

            deleted = await api_client.delete(f"/portfolio/transactions/{payload['id']}")
            assert deleted.status_code == 204
            missing = await api_client.delete(f"/portfolio/transactions/{payload['id']}")
            assert missing.status_code == 404

    asyncio.run(_scenario())


def test_invalid_transaction_lists_errors(settings: TrackerSettings):
    client_manager = _client(settings)

    async def _scenario():
        async with client_manager() as api_client:
            response = await api_client.post(
                "/portfolio/transactions",
                json={"type": "buy", "quantity": 0, "price": 10, "date": "10/01/2024"},
            )
            assert response.status_code == 422
            errors = response.json()["detail"]["errors"]
            assert "Ticker is required" in errors
            assert "Invalid date. Use the YYYY-MM-DD format" in errors
            assert "Quantity must be greater than zero" in errors

    asyncio.run(_scenario())


def test_positions_with_events_and_prices(settings: TrackerSettings):
    client_manager = _client(settings)

    async def _scenario():
        async with client_manager() as api_client:
            await api_client.post("/portfolio/transactions", json=_buy("ITSA4", 100, 10, "2024-01-10"))
            await api_client.post(
                "/portfolio/transactions", json=_buy("TAEE11", 10, 30, "2024-01-12", company="Taesa")
            )

            event = await api_client.post(
                "/portfolio/events",
                json={
                    "symbol": "ITSA4",
                    "company_name": "Itausa",
                    "event_type": "split",
                    "event_date": "2024-02-01",
                    "ratio_from": 1,
                    "ratio_to": 2,
                },
            )
            assert event.status_code == 201
            event_payload = event.json()
            assert event_payload["processed"] is False
            assert event_payload["description"] == "Split 1:2 - each 1 share becomes 2 shares"

            positions = (await api_client.get("/portfolio/positions")).json()
            assert [p["symbol"] for p in positions] == ["ITSA4", "TAEE11"]
            assert positions[0]["total_shares"] == 100
            assert len(positions[0]["corporate_events"]) == 1
            assert positions[0]["adjustments"] == []

            processed = await api_client.post(f"/portfolio/events/{event_payload['id']}/process")
            assert processed.json()["processed"] is True

            price = await api_client.put("/portfolio/prices/itsa4", json={"current_price": 6})
            assert price.status_code == 204
            fair = await api_client.post(
                "/portfolio/prices/ITSA4/fair", json={"dividends": {"2021": 0.5, "2022": 0.7, "2023": 0.6}}
            )
            assert fair.status_code == 200
            fair_payload = fair.json()
            assert fair_payload["years_analyzed"] == 3
            assert round(fair_payload["fair_price"], 2) == 10.0
            assert round(fair_payload["safety_margin"], 2) == 40.0
            assert fair_payload["safety_margin_rating"] == "excellent"

            stored = await api_client.get("/portfolio/prices/itsa4/fair")
            assert stored.status_code == 200
            assert stored.json()["dividend_data"] == {"2021": 0.5, "2022": 0.7, "2023": 0.6}
            assert round(stored.json()["fair_price"], 2) == 10.0

            positions = (await api_client.get("/portfolio/positions", params={"search": "itau"})).json()
            [itausa] = positions
            assert itausa["total_shares"] == 200
            assert itausa["average_price"] == 5
            assert itausa["current_value"] == 1200
            assert itausa["profit_loss"] == 200
            assert itausa["safety_margin_rating"] == "excellent"
            assert itausa["adjustments"][0]["new_quantity"] == 200

            by_symbol = (
                await api_client.get("/portfolio/positions", params={"sort": "symbol", "order": "desc"})
            ).json()
            assert [p["symbol"] for p in by_symbol] == ["TAEE11", "ITSA4"]

            preview = await api_client.get("/portfolio/positions/itsa4/preview", params={"price": 7.5})
            assert preview.status_code == 200
            assert preview.json()["current_value"] == 1500
            assert round(preview.json()["safety_margin"], 2) == 25.0

            summary = (await api_client.get("/portfolio/summary")).json()
            assert summary["position_count"] == 2
            assert summary["total_invested"] == 1300
            assert summary["total_current_value"] == 1500

    asyncio.run(_scenario())


def test_event_validation_and_missing_records(settings: TrackerSettings):
    client_manager = _client(settings)

    async def _scenario():
        async with client_manager() as api_client:
            response = await api_client.post(
                "/portfolio/events",
                json={
                    "symbol": "ITSA4",
                    "company_name": "Itausa",
                    "event_type": "merger",
                    "event_date": "2024-02-01",
                    "new_symbol": "NEWC3",
                    "new_company_name": "NewCo",
                },
            )
            assert response.status_code == 422
            assert response.json()["detail"]["errors"] == ["Must specify shares received or cash per share"]

            assert (await api_client.post("/portfolio/events/nope/process")).status_code == 404
            assert (await api_client.delete("/portfolio/events/nope")).status_code == 404
            assert (
                await api_client.get("/portfolio/positions/PETR4/preview", params={"price": 10})
            ).status_code == 404

            fair = await api_client.post("/portfolio/prices/ITSA4/fair", json={"dividends": {"2023": None}})
            assert fair.status_code == 422
            assert (await api_client.get("/portfolio/prices/ITSA4/fair")).status_code == 404

    asyncio.run(_scenario())
