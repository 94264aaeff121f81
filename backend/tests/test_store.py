from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest

from warranty_tracker.database import Base
from warranty_tracker.errors import StorageFault, ValidationError
from warranty_tracker.store import SqlProductStore


def test_create_assigns_id_and_created_at(store, payload_factory):
    product = store.create(payload_factory())

    assert product.id.startswith("prod_")
    assert product.created_at.tzinfo is not None
    assert product.brand == "Sony"
    assert product.purchase_date == date(2024, 3, 10)
    assert store.get(product.id) == product


def test_create_defaults_optional_workflow_fields(store):
    product = store.create({"brand": "Bosch", "product_name": "Dishwasher"})

    assert product.fields_to_verify == []
    assert product.alert_trigger is False
    assert product.verification_required is False


@pytest.mark.parametrize("missing", ["brand", "product_name"])
def test_create_requires_identity_fields(store, payload_factory, missing):
    payload = payload_factory()
    del payload[missing]

    with pytest.raises(ValidationError):
        store.create(payload)
    assert store.list() == []


def test_create_rejects_blank_brand(store, payload_factory):
    with pytest.raises(ValidationError):
        store.create(payload_factory(brand="   "))
    assert store.list() == []


def test_create_rejects_unknown_status_color(store, payload_factory):
    with pytest.raises(ValidationError):
        store.create(payload_factory(status_color="BLUE"))


def test_create_rejects_store_owned_fields(store, payload_factory):
    with pytest.raises(ValidationError):
        store.create(payload_factory(id="prod_custom"))


def test_ids_are_unique(store, payload_factory):
    ids = [store.create(payload_factory(invoice_id=f"INV-{i}")).id for i in range(25)]
    assert len(set(ids)) == len(ids)


def test_concurrent_creates_never_collide(store, payload_factory):
    with ThreadPoolExecutor(max_workers=8) as pool:
        products = list(pool.map(lambda i: store.create(payload_factory(invoice_id=f"INV-{i}")), range(40)))

    assert len({product.id for product in products}) == 40
    assert len(store.list()) == 40


def test_list_is_newest_first(store, payload_factory):
    first = store.create(payload_factory(brand="A"))
    second = store.create(payload_factory(brand="B"))
    third = store.create(payload_factory(brand="C"))

    assert [product.id for product in store.list()] == [third.id, second.id, first.id]


def test_list_empty_store(store):
    assert store.list() == []


def test_get_missing_returns_none(store):
    assert store.get("prod_missing") is None


def test_sparse_merge_keeps_unsent_fields(store, payload_factory):
    product = store.create(payload_factory(brand="X", product_name="Y"))

    updated = store.update(product.id, {"brand": "Z"})

    assert updated.brand == "Z"
    assert updated.product_name == "Y"
    assert updated.invoice_id == "INV-1001"
    assert store.get(product.id) == updated


def test_falsy_values_still_overwrite(store, payload_factory):
    product = store.create(payload_factory(alert_trigger=True, days_remaining=12, status_message="Expiring soon"))

    updated = store.update(product.id, {"alert_trigger": False, "days_remaining": 0, "status_message": ""})

    assert updated.alert_trigger is False
    assert updated.days_remaining == 0
    assert updated.status_message == ""


def test_created_at_survives_updates(store, payload_factory):
    product = store.create(payload_factory())

    store.update(product.id, {"brand": "Sony Group"})
    store.update(product.id, {"status_color": "YELLOW", "days_remaining": 20})

    assert store.get(product.id).created_at == product.created_at


def test_update_cannot_touch_id_or_created_at(store, payload_factory):
    product = store.create(payload_factory())

    with pytest.raises(ValidationError):
        store.update(product.id, {"created_at": "2020-01-01T00:00:00Z"})
    with pytest.raises(ValidationError):
        store.update(product.id, {"id": "prod_other"})
    assert store.get(product.id) == product


def test_update_missing_returns_none(store):
    assert store.update("prod_missing", {"brand": "Z"}) is None


def test_invalid_update_leaves_record_untouched(store, payload_factory):
    product = store.create(payload_factory())

    with pytest.raises(ValidationError):
        store.update(product.id, {"brand": "LG", "overall_confidence": 3.5})

    assert store.get(product.id) == product


def test_verification_resolves_in_one_update(store, payload_factory):
    product = store.create(
        payload_factory(invoice_id="INV-4?", verification_required=True, fields_to_verify=["invoice_id"])
    )

    updated = store.update(
        product.id,
        {"invoice_id": "INV-42", "verification_required": False, "fields_to_verify": []},
    )

    assert updated.invoice_id == "INV-42"
    assert updated.verification_required is False
    assert updated.fields_to_verify == []


def test_clearing_flag_without_fields_is_rejected(store, payload_factory):
    product = store.create(payload_factory(verification_required=True, fields_to_verify=["invoice_id"]))

    with pytest.raises(ValidationError):
        store.update(product.id, {"verification_required": False})

    assert store.get(product.id).verification_required is True


def test_create_rejects_fields_without_flag(store, payload_factory):
    with pytest.raises(ValidationError):
        store.create(payload_factory(verification_required=False, fields_to_verify=["brand"]))


def test_fields_to_verify_must_name_product_fields(store, payload_factory):
    with pytest.raises(ValidationError):
        store.create(payload_factory(verification_required=True, fields_to_verify=["serial_number"]))


def test_delete_is_idempotent(store, payload_factory):
    product = store.create(payload_factory())
    other = store.create(payload_factory(invoice_id="INV-2"))

    assert store.delete(product.id) is True
    assert store.delete(product.id) is False
    assert store.delete("prod_never_existed") is False
    assert [item.id for item in store.list()] == [other.id]


def test_list_get_delete_scenario(store, payload_factory):
    record_a = store.create(payload_factory(status_color="GREEN"))
    record_b = store.create(payload_factory(status_color="RED", invoice_id="INV-2"))

    assert [product.id for product in store.list()] == [record_b.id, record_a.id]

    store.delete(record_a.id)
    assert [product.id for product in store.list()] == [record_b.id]


def test_concurrent_updates_do_not_tear(store, payload_factory):
    product = store.create(payload_factory())

    def write(i):
        return store.update(product.id, {"brand": f"brand-{i}", "invoice_id": f"INV-{i}"})

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(write, range(50)))

    final = store.get(product.id)
    assert final.brand.split("-")[1] == final.invoice_id.split("-")[1]


def test_sql_store_reports_storage_fault(tmp_path, payload_factory):
    store = SqlProductStore(f"sqlite:///{(tmp_path / 'broken.db').as_posix()}")
    store.migrate()
    product = store.create(payload_factory())
    Base.metadata.drop_all(bind=store.engine)

    with pytest.raises(StorageFault) as excinfo:
        store.list()
    with pytest.raises(StorageFault):
        store.update(product.id, {"brand": "Z"})

    assert "sqlite" not in excinfo.value.detail.lower()
    store.close()


def test_sql_store_persists_across_instances(tmp_path, payload_factory):
    url = f"sqlite:///{(tmp_path / 'durable.db').as_posix()}"
    first = SqlProductStore(url)
    first.migrate()
    product = first.create(payload_factory(verification_required=True, fields_to_verify=["invoice_id", "brand"]))
    first.close()

    second = SqlProductStore(url)
    reloaded = second.get(product.id)
    second.close()

    assert reloaded == product
    assert reloaded.fields_to_verify == ["invoice_id", "brand"]


def test_sql_store_requires_url():
    with pytest.raises(ValueError):
        SqlProductStore("")


def test_mutating_returned_records_does_not_change_store(store, payload_factory):
    product = store.create(payload_factory(verification_required=True, fields_to_verify=["invoice_id"]))
    cleared = store.update(product.id, {"verification_required": False, "fields_to_verify": []})

    cleared.fields_to_verify.append("brand")
    store.get(product.id).fields_to_verify.append("brand")
    store.list()[0].fields_to_verify.append("brand")
    product.fields_to_verify.append("purchase_date")

    stored = store.get(product.id)
    assert stored.verification_required is False
    assert stored.fields_to_verify == []


def test_update_with_builds_partial_from_current_record(store, payload_factory):
    product = store.create(payload_factory(verification_required=True, fields_to_verify=["invoice_id"]))
    store.update(product.id, {"fields_to_verify": ["invoice_id", "purchase_date"]})
    seen = []

    def build(current):
        seen.append(list(current.fields_to_verify))
        return {"purchase_date": "2024-04-01", "verification_required": False, "fields_to_verify": []}

    updated = store.update_with(product.id, build)

    assert seen == [["invoice_id", "purchase_date"]]
    assert updated.purchase_date == date(2024, 4, 1)
    assert updated.fields_to_verify == []


def test_update_with_rejection_leaves_record_untouched(store, payload_factory):
    product = store.create(payload_factory(verification_required=True, fields_to_verify=["invoice_id"]))

    def build(current):
        raise ValidationError("Fields were not flagged for verification: brand")

    with pytest.raises(ValidationError):
        store.update_with(product.id, build)

    assert store.get(product.id) == product
    assert store.update_with("prod_missing", build) is None
