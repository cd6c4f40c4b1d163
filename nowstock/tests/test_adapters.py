"""
Tests for the tag resolver loader and the RFID scan adapter.
"""

import io

import pytest
from django.core.exceptions import ImproperlyConfigured

from nowstock.adapters import ModelTagResolver, ScanAdapter, get_tag_resolver
from nowstock.exceptions import StorageFault
from nowstock.models import Movement
from nowstock.protocols import ProductIdentity, TagResolver
from nowstock.services.engine import MovementOutcome

from .conftest import OTHER_TENANT, TENANT


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FlakyEngine:
    """Raises the given faults, then succeeds."""

    def __init__(self, *faults):
        self.faults = list(faults)
        self.calls = []

    def record_scan(self, tenant_id, rfid_tag, actor_id):
        self.calls.append((tenant_id, rfid_tag, actor_id))
        if self.faults:
            raise self.faults.pop(0)
        return MovementOutcome(ok=True, kind='entrada', quantity=1, new_quantity=1)


class TestModelTagResolver:
    """Tests for ModelTagResolver."""

    pytestmark = pytest.mark.django_db

    def test_resolve(self, product):
        identity = ModelTagResolver().resolve(TENANT, f" {product.rfid_tag} ")

        assert identity == ProductIdentity(
            product_id=product.pk,
            tenant_id=TENANT,
            name='Caixa de Parafusos',
            rfid_tag=product.rfid_tag,
            minimum_quantity=2,
        )

    def test_resolve_is_tenant_scoped(self, product, foreign_product):
        assert ModelTagResolver().resolve(OTHER_TENANT, product.rfid_tag).product_id == foreign_product.pk

    def test_blank_tag(self, product):
        assert ModelTagResolver().resolve(TENANT, '  ') is None

    def test_get(self, product, foreign_product):
        resolver = ModelTagResolver()

        assert resolver.get(TENANT, product.pk).name == product.name
        assert resolver.get(TENANT, foreign_product.pk) is None

    def test_satisfies_protocol(self):
        assert isinstance(ModelTagResolver(), TagResolver)


class TestGetTagResolver:
    """Tests for get_tag_resolver()."""

    def test_default(self):
        resolver = get_tag_resolver()

        assert isinstance(resolver, ModelTagResolver)
        assert get_tag_resolver() is resolver

    def test_bad_path(self, settings):
        settings.NOWSTOCK = {'TAG_RESOLVER': 'nowstock.adapters.nope.Resolver'}

        with pytest.raises(ImproperlyConfigured):
            get_tag_resolver()

    def test_empty_path(self, settings):
        settings.NOWSTOCK = {'TAG_RESOLVER': ''}

        with pytest.raises(ImproperlyConfigured):
            get_tag_resolver()


class TestScanAdapter:
    """Tests for ScanAdapter.on_tag_read()."""

    def test_requires_actor(self, settings):
        settings.NOWSTOCK = {'SCANNER_ACTOR_ID': None}

        with pytest.raises(ImproperlyConfigured):
            ScanAdapter(engine=FlakyEngine())

    def test_actor_from_settings(self, settings):
        settings.NOWSTOCK = {'SCANNER_ACTOR_ID': 42}
        engine = FlakyEngine()

        ScanAdapter(engine=engine).on_tag_read(TENANT, 'TAG-1')

        assert engine.calls == [(TENANT, 'TAG-1', 42)]

    def test_blank_read_ignored(self):
        engine = FlakyEngine()
        adapter = ScanAdapter(engine=engine, actor_id=7)

        assert adapter.on_tag_read(TENANT, '  \n') is None
        assert engine.calls == []

    def test_debounce_window(self):
        clock = FakeClock()
        engine = FlakyEngine()
        adapter = ScanAdapter(engine=engine, actor_id=7, debounce_seconds=2.0, clock=clock)

        assert adapter.on_tag_read(TENANT, 'TAG-1') is not None
        clock.advance(1.0)
        assert adapter.on_tag_read(TENANT, 'TAG-1') is None
        # window restarts on every read
        clock.advance(1.5)
        assert adapter.on_tag_read(TENANT, 'TAG-1') is None
        clock.advance(2.0)
        assert adapter.on_tag_read(TENANT, 'TAG-1') is not None
        assert len(engine.calls) == 2

    def test_debounce_per_tag_and_tenant(self):
        clock = FakeClock()
        engine = FlakyEngine()
        adapter = ScanAdapter(engine=engine, actor_id=7, debounce_seconds=2.0, clock=clock)

        adapter.on_tag_read(TENANT, 'TAG-1')
        adapter.on_tag_read(TENANT, 'TAG-2')
        adapter.on_tag_read(OTHER_TENANT, 'TAG-1')

        assert len(engine.calls) == 3

    def test_retries_retryable_fault(self):
        delays = []
        engine = FlakyEngine(StorageFault(retryable=True), StorageFault(retryable=True))
        adapter = ScanAdapter(
            engine=engine, actor_id=7, retry_attempts=3,
            backoff_seconds=0.5, sleep=delays.append,
        )

        outcome = adapter.on_tag_read(TENANT, 'TAG-1')

        assert outcome.ok
        assert len(engine.calls) == 3
        assert delays == [0.5, 1.0]

    def test_gives_up_after_attempts(self):
        engine = FlakyEngine(*[StorageFault(retryable=True) for _ in range(3)])
        adapter = ScanAdapter(engine=engine, actor_id=7, retry_attempts=3, sleep=lambda s: None)

        with pytest.raises(StorageFault):
            adapter.on_tag_read(TENANT, 'TAG-1')

        assert len(engine.calls) == 3

    def test_non_retryable_raised_at_once(self):
        engine = FlakyEngine(StorageFault(retryable=False))
        adapter = ScanAdapter(engine=engine, actor_id=7, sleep=lambda s: None)

        with pytest.raises(StorageFault) as exc:
            adapter.on_tag_read(TENANT, 'TAG-1')

        assert not exc.value.retryable
        assert len(engine.calls) == 1

    def test_failed_read_is_not_debounced(self):
        """A read that raised can be scanned again right away."""
        clock = FakeClock()
        engine = FlakyEngine(StorageFault(retryable=False))
        adapter = ScanAdapter(engine=engine, actor_id=7, debounce_seconds=2.0, clock=clock)

        with pytest.raises(StorageFault):
            adapter.on_tag_read(TENANT, 'TAG-1')
        clock.advance(0.5)
        outcome = adapter.on_tag_read(TENANT, 'TAG-1')

        assert outcome.ok
        assert len(engine.calls) == 2

    def test_exhausted_retries_are_not_debounced(self):
        clock = FakeClock()
        engine = FlakyEngine(StorageFault(retryable=True), StorageFault(retryable=True))
        adapter = ScanAdapter(
            engine=engine, actor_id=7, retry_attempts=2,
            debounce_seconds=2.0, clock=clock, sleep=lambda s: None,
        )

        with pytest.raises(StorageFault):
            adapter.on_tag_read(TENANT, 'TAG-1')

        assert adapter.on_tag_read(TENANT, 'TAG-1').ok
        assert len(engine.calls) == 3

    def test_expired_reads_are_dropped(self):
        """Memory stays bounded by the reads inside the window."""
        clock = FakeClock()
        adapter = ScanAdapter(engine=FlakyEngine(), actor_id=7, debounce_seconds=2.0, clock=clock)

        for n in range(500):
            adapter.on_tag_read(TENANT, f'TAG-{n}')
        clock.advance(1.0)
        adapter.on_tag_read(TENANT, 'TAG-recent')
        clock.advance(1.5)
        adapter.on_tag_read(TENANT, 'TAG-last')

        assert list(adapter._last_seen) == [(TENANT, 'TAG-recent'), (TENANT, 'TAG-last')]

    def test_repeated_read_moves_to_the_end(self):
        clock = FakeClock()
        engine = FlakyEngine()
        adapter = ScanAdapter(engine=engine, actor_id=7, debounce_seconds=2.0, clock=clock)

        adapter.on_tag_read(TENANT, 'TAG-1')
        clock.advance(0.5)
        adapter.on_tag_read(TENANT, 'TAG-2')
        clock.advance(1.0)
        adapter.on_tag_read(TENANT, 'TAG-1')  # debounced, window restarts
        clock.advance(1.0)
        # TAG-2 expired, TAG-1 is still inside its restarted window
        assert adapter.on_tag_read(TENANT, 'TAG-1') is None
        assert list(adapter._last_seen) == [(TENANT, 'TAG-1')]
        assert len(engine.calls) == 2


@pytest.mark.django_db(transaction=True)
class TestScanAdapterConsume:
    """Tests for ScanAdapter.consume() against the real engine."""

    def test_consume_stream(self, engine, scanner, product):
        clock = FakeClock()
        adapter = ScanAdapter(engine=engine, actor_id=scanner.pk, clock=clock)
        reader = io.StringIO(f"{product.rfid_tag}\n\n{product.rfid_tag}\nDESCONHECIDA\n")

        results = list(adapter.consume(TENANT, reader))

        # the second read of the same tag falls inside the debounce window
        assert [tag for tag, _ in results] == [product.rfid_tag, 'DESCONHECIDA']
        first, unknown = (outcome for _, outcome in results)
        assert first.kind == 'entrada'
        assert unknown.error == 'UNREGISTERED_TAG'
        assert Movement.objects.count() == 1

    def test_consume_after_window(self, engine, scanner, product):
        clock = FakeClock()
        adapter = ScanAdapter(engine=engine, actor_id=scanner.pk, clock=clock)

        def reads():
            yield product.rfid_tag
            clock.advance(5)
            yield product.rfid_tag

        kinds = [outcome.kind for _, outcome in adapter.consume(TENANT, reads())]

        assert kinds == ['entrada', 'saida']
        assert engine.current(TENANT, product.pk) == 0
