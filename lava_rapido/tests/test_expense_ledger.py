from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from lava_rapido.app import models, schemas
from lava_rapido.app.errors import ExpenseAlreadyPaidError, NotFoundError, ValidationError
from lava_rapido.app.services import ExpenseService, ExpenseTypeService, ReportService


def _type_named(db_session, business, name: str) -> models.ExpenseType:
    return next(t for t in ExpenseTypeService.list_types(db_session, business.id) if t.name == name)


def _recurring(db_session, business, month_year: str) -> list[models.Expense]:
    return [
        expense
        for expense in ExpenseService.list_expenses(db_session, business.id, month_year)
        if expense.is_recurring
    ]


def test_recurring_generation_is_idempotent(db_session, business):
    today = date(2024, 3, 12)

    first = ExpenseService.ensure_recurring_instances(db_session, business.id, "2024-03", today)
    second = ExpenseService.ensure_recurring_instances(db_session, business.id, "2024-03", today)

    assert sorted(expense.name for expense in first) == ["Aluguel", "Luz", "Água"]
    assert second == []
    recurring = _recurring(db_session, business, "2024-03")
    assert len(recurring) == 3
    assert all(expense.status == models.ExpenseStatus.PENDENTE for expense in recurring)


def test_recurring_generation_survives_a_missed_existence_check(db_session, business, monkeypatch):
    today = date(2024, 3, 12)
    ExpenseService.ensure_recurring_instances(db_session, business.id, "2024-03", today)

    # Another session inserted the rows after our read: the check sees nothing.
    monkeypatch.setattr(ExpenseService, "_existing_type_ids", staticmethod(lambda *args: set()))

    created = ExpenseService.ensure_recurring_instances(db_session, business.id, "2024-03", today)

    assert created == []
    assert len(_recurring(db_session, business, "2024-03")) == 3


def test_no_generation_before_available_day(db_session, business):
    created = ExpenseService.ensure_recurring_instances(
        db_session, business.id, "2024-03", date(2024, 3, 3)
    )

    assert [expense.name for expense in created] == ["Aluguel"]

    later = ExpenseService.ensure_recurring_instances(
        db_session, business.id, "2024-03", date(2024, 3, 5)
    )
    assert sorted(expense.name for expense in later) == ["Luz", "Água"]


@pytest.mark.parametrize("month_year", ["2024-02", "2024-04", "2023-03"])
def test_no_generation_outside_current_month(db_session, business, month_year):
    created = ExpenseService.ensure_recurring_instances(
        db_session, business.id, month_year, date(2024, 3, 28)
    )

    assert created == []
    assert ExpenseService.list_expenses(db_session, business.id, month_year) == []


def test_invalid_month_key_is_rejected(db_session, business):
    with pytest.raises(ValidationError):
        ExpenseService.list_expenses(db_session, business.id, "2024-13")
    with pytest.raises(ValidationError):
        ExpenseService.ensure_recurring_instances(db_session, business.id, "03/2024", date(2024, 3, 1))


def test_scenario_light_bill_generated_and_paid(db_session, business, owner):
    luz = _type_named(db_session, business, "Luz")
    ExpenseTypeService.update_type(
        db_session,
        business.id,
        luz.id,
        schemas.ExpenseTypeUpdate(default_value=Decimal("150.00"), available_day=5, due_day=15),
    )

    ExpenseService.ensure_recurring_instances(db_session, business.id, "2024-03", date(2024, 3, 6))
    expenses = ExpenseService.list_expenses(db_session, business.id, "2024-03")
    light = [expense for expense in expenses if expense.name == "Luz"]
    assert len(light) == 1
    assert light[0].status == models.ExpenseStatus.PENDENTE
    assert light[0].is_recurring is True

    paid = ExpenseService.pay_expense(
        db_session,
        business.id,
        light[0].id,
        schemas.ExpensePayment(amount_paid=Decimal("145.50"), paid_at=date(2024, 3, 10)),
        member_id=owner.id,
    )

    assert paid.status == models.ExpenseStatus.PAGO
    assert paid.amount_paid == Decimal("145.50")
    assert paid.paid_by_member_id == owner.id
    summary = ReportService.compute_summary(
        db_session, business.id, date(2024, 3, 1), date(2024, 3, 31)
    )
    assert summary.total_expenses == Decimal("145.50")


def test_payment_is_one_way(db_session, business):
    ExpenseService.ensure_recurring_instances(db_session, business.id, "2024-03", date(2024, 3, 12))
    rent = next(e for e in _recurring(db_session, business, "2024-03") if e.name == "Aluguel")
    payment = schemas.ExpensePayment(amount_paid=Decimal("1200"), paid_at=date(2024, 3, 10))

    ExpenseService.pay_expense(db_session, business.id, rent.id, payment)
    with pytest.raises(ExpenseAlreadyPaidError):
        ExpenseService.pay_expense(
            db_session,
            business.id,
            rent.id,
            schemas.ExpensePayment(amount_paid=Decimal("1"), paid_at=date(2024, 3, 11)),
        )

    db_session.expire_all()
    stored = ExpenseService.get_expense(db_session, business.id, rent.id)
    assert stored.status == models.ExpenseStatus.PAGO
    assert stored.amount_paid == Decimal("1200.00")
    assert stored.paid_at == date(2024, 3, 10)


def test_paying_unknown_expense_raises_not_found(db_session, business):
    with pytest.raises(NotFoundError):
        ExpenseService.pay_expense(
            db_session,
            business.id,
            "00000000-0000-0000-0000-000000000000",
            schemas.ExpensePayment(amount_paid=Decimal("10"), paid_at=date(2024, 3, 10)),
        )


def test_payment_keeps_description_when_none_is_given(db_session, business):
    expense = ExpenseService.add_ad_hoc_expense(
        db_session,
        business.id,
        schemas.AdHocExpenseCreate(
            value=Decimal("80"),
            category="Manutenção",
            description="Troca da mangueira",
            due_date=date(2024, 3, 20),
        ),
        today=date(2024, 3, 12),
    )

    paid = ExpenseService.pay_expense(
        db_session,
        business.id,
        expense.id,
        schemas.ExpensePayment(amount_paid=Decimal("80"), paid_at=date(2024, 3, 13)),
    )

    assert paid.description == "Troca da mangueira"


def test_payment_description_limit_matches_ad_hoc_rule(db_session, business):
    ExpenseService.ensure_recurring_instances(db_session, business.id, "2024-03", date(2024, 3, 12))
    rent = next(e for e in _recurring(db_session, business, "2024-03") if e.name == "Aluguel")

    with pytest.raises(ValidationError, match="no máximo 500 caracteres"):
        ExpenseService.pay_expense(
            db_session,
            business.id,
            rent.id,
            schemas.ExpensePayment(
                amount_paid=Decimal("1200"), paid_at=date(2024, 3, 10), description="a" * 501
            ),
        )

    db_session.expire_all()
    assert ExpenseService.get_expense(db_session, business.id, rent.id).status == (
        models.ExpenseStatus.PENDENTE
    )


def test_scenario_pending_ad_hoc_requires_due_date(db_session, business):
    payload = schemas.AdHocExpenseCreate(value=Decimal("35"), category="Produtos", status="pendente")

    with pytest.raises(ValidationError) as excinfo:
        ExpenseService.add_ad_hoc_expense(db_session, business.id, payload, today=date(2024, 3, 12))
    assert "data limite" in str(excinfo.value)

    payload.due_date = date(2024, 4, 1)
    expense = ExpenseService.add_ad_hoc_expense(
        db_session, business.id, payload, today=date(2024, 3, 12)
    )

    assert expense.is_recurring is False
    assert expense.expense_type_id is None
    assert expense.status == models.ExpenseStatus.PENDENTE
    assert expense.due_date == date(2024, 4, 1)
    assert expense.name == "Produtos"
    assert expense.month_year == "2024-03"


@pytest.mark.parametrize(
    "value, accepted",
    [
        (Decimal("2000000"), False),
        (Decimal("0"), False),
        (Decimal("-5"), False),
        (Decimal("1000000"), True),
        (Decimal("50000"), True),
    ],
)
def test_scenario_ad_hoc_amount_bounds(db_session, business, value, accepted):
    payload = schemas.AdHocExpenseCreate(value=value, category="Investimento", status="pago")

    if not accepted:
        with pytest.raises(ValidationError):
            ExpenseService.add_ad_hoc_expense(
                db_session, business.id, payload, today=date(2024, 3, 12)
            )
        return

    expense = ExpenseService.add_ad_hoc_expense(
        db_session, business.id, payload, today=date(2024, 3, 12)
    )
    assert expense.status == models.ExpenseStatus.PAGO
    assert expense.amount_paid == value
    assert expense.paid_at == date(2024, 3, 12)


def test_ad_hoc_validation_reports_first_broken_rule(db_session, business):
    payload = schemas.AdHocExpenseCreate(
        value=Decimal("0"), category=None, description="x" * 600, status="pendente"
    )

    with pytest.raises(ValidationError) as excinfo:
        ExpenseService.add_ad_hoc_expense(db_session, business.id, payload, today=date(2024, 3, 12))

    assert "maior que zero" in str(excinfo.value)


def test_ad_hoc_rejects_unknown_category_and_long_description(db_session, business):
    with pytest.raises(ValidationError, match="Categoria inválida"):
        ExpenseService.add_ad_hoc_expense(
            db_session,
            business.id,
            schemas.AdHocExpenseCreate(value=Decimal("10"), category="Lazer", status="pago"),
            today=date(2024, 3, 12),
        )
    with pytest.raises(ValidationError, match="500 caracteres"):
        ExpenseService.add_ad_hoc_expense(
            db_session,
            business.id,
            schemas.AdHocExpenseCreate(
                value=Decimal("10"), category="Outros", description="a" * 501, status="pago"
            ),
            today=date(2024, 3, 12),
        )


def test_list_orders_recurring_first_then_by_name(db_session, business):
    today = date(2024, 3, 12)
    ExpenseService.add_ad_hoc_expense(
        db_session,
        business.id,
        schemas.AdHocExpenseCreate(value=Decimal("20"), category="Alimentação", status="pago"),
        today=today,
    )
    ExpenseService.ensure_recurring_instances(db_session, business.id, "2024-03", today)

    names = [e.name for e in ExpenseService.list_expenses(db_session, business.id, "2024-03")]

    assert names == ["Aluguel", "Luz", "Água", "Alimentação"]


def test_expenses_api_generates_and_lists(client, db_session, business):
    response = client.get("/expenses", params={"month_year": "2024-03"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["generated"] == 3
    assert payload["total"] == 3
    rent = next(item for item in payload["items"] if item["name"] == "Aluguel")
    assert rent["due_day"] == 10
    assert rent["status"] == "pendente"

    again = client.get("/expenses")
    assert again.json()["generated"] == 0
    assert again.json()["month_year"] == "2024-03"


def test_expenses_api_create_and_pay(client, owner):
    created = client.post(
        "/expenses",
        json={"value": "35.90", "category": "Produtos", "status": "pendente", "due_date": "2024-03-20"},
    )
    assert created.status_code == 201
    body = created.json()
    assert body["created_by_name"] == "Marcos"

    paid = client.post(
        f"/expenses/{body['id']}/pay",
        json={"amount_paid": "35.90", "paid_at": "2024-03-12", "description": "Shampoo"},
    )
    assert paid.status_code == 200
    assert paid.json()["status"] == "pago"
    assert paid.json()["paid_by_name"] == "Marcos"

    repeat = client.post(
        f"/expenses/{body['id']}/pay",
        json={"amount_paid": "35.90", "paid_at": "2024-03-12"},
    )
    assert repeat.status_code == 409


def test_expenses_api_long_descriptions_are_rejected_alike(client):
    too_long = "a" * 501
    created = client.post(
        "/expenses",
        json={"value": "20", "category": "Produtos", "status": "pago", "description": too_long},
    )
    pending = client.post(
        "/expenses",
        json={"value": "20", "category": "Produtos", "status": "pendente", "due_date": "2024-03-20"},
    ).json()

    paid = client.post(
        f"/expenses/{pending['id']}/pay",
        json={"amount_paid": "20", "paid_at": "2024-03-12", "description": too_long},
    )

    assert created.status_code == 400
    assert paid.status_code == 400
    assert paid.json()["detail"] == created.json()["detail"]
    items = client.get("/expenses").json()["items"]
    assert next(item for item in items if item["id"] == pending["id"])["status"] == "pendente"


def test_expenses_api_translates_validation_errors(client):
    missing_due = client.post("/expenses", json={"value": "10", "category": "Produtos"})
    assert missing_due.status_code == 400
    assert "data limite" in missing_due.json()["detail"]

    bad_month = client.get("/expenses", params={"month_year": "março"})
    assert bad_month.status_code == 400

    bad_payment = client.post(
        "/expenses/anything/pay", json={"amount_paid": "0", "paid_at": "2024-03-12"}
    )
    assert bad_payment.status_code == 422

    unknown = client.post(
        "/expenses/anything/pay", json={"amount_paid": "10", "paid_at": "2024-03-12"}
    )
    assert unknown.status_code == 404


def test_partner_sees_the_same_ledger(partner_client, business):
    response = partner_client.get("/expenses")

    assert response.status_code == 200
    assert response.json()["total"] == 3
