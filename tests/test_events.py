from decimal import Decimal
from typing import List

from httpx import AsyncClient

from schoolhub.core.enums import Role
from schoolhub.core.events import FEE_ASSIGNED, PAYMENT_RECORDED, DomainEvent, EventBus


async def test_publish_reaches_subscribers_of_that_type() -> None:
    bus = EventBus()
    seen: List[DomainEvent] = []

    async def handler(event: DomainEvent) -> None:
        seen.append(event)

    bus.subscribe(PAYMENT_RECORDED, handler)
    await bus.publish(DomainEvent(PAYMENT_RECORDED, {"amount": "10.00"}))
    await bus.publish(DomainEvent(FEE_ASSIGNED, {}))

    assert [e.event_type for e in seen] == [PAYMENT_RECORDED]
    assert seen[0].payload == {"amount": "10.00"}


async def test_failing_handler_does_not_stop_others() -> None:
    bus = EventBus()
    seen: List[str] = []

    async def broken(event: DomainEvent) -> None:
        raise RuntimeError("socket down")

    async def healthy(event: DomainEvent) -> None:
        seen.append(event.event_type)

    bus.subscribe(FEE_ASSIGNED, broken)
    bus.subscribe(FEE_ASSIGNED, healthy)
    await bus.publish(DomainEvent(FEE_ASSIGNED, {}))

    assert seen == [FEE_ASSIGNED]


async def test_unsubscribe() -> None:
    bus = EventBus()
    seen: List[DomainEvent] = []

    async def handler(event: DomainEvent) -> None:
        seen.append(event)

    bus.subscribe(FEE_ASSIGNED, handler)
    bus.unsubscribe(FEE_ASSIGNED, handler)
    await bus.publish(DomainEvent(FEE_ASSIGNED, {}))
    assert seen == []


async def test_api_publishes_assignment_and_payment_events(
    client: AsyncClient, event_bus: EventBus, headers_for, make_student, make_fee
) -> None:
    seen: List[DomainEvent] = []

    async def handler(event: DomainEvent) -> None:
        seen.append(event)

    event_bus.subscribe(FEE_ASSIGNED, handler)
    event_bus.subscribe(PAYMENT_RECORDED, handler)

    headers = await headers_for(Role.CASHIER)
    student = await make_student()
    fee = await make_fee("Tuition", "500")
    student_id = str(student.id)

    assignment = (
        await client.post(
            "/api/finance/assign",
            json={"studentId": student_id, "feeStructureId": str(fee.id)},
            headers=headers,
        )
    ).json()["data"]
    await client.post(
        "/api/finance/pay",
        json={"studentFeeId": assignment["id"], "amount": 500, "method": "CARD"},
        headers=headers,
    )

    assert [e.event_type for e in seen] == [FEE_ASSIGNED, PAYMENT_RECORDED]
    assert seen[0].payload["student_id"] == student_id
    assert seen[1].payload["status"] == "PAID"
    assert Decimal(seen[1].payload["total_paid"]) == Decimal("500")
