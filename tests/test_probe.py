# Tests de la prueba de conexión (asyncio)
# Ejecutar con: pytest tests/test_probe.py -v

import asyncio

import pytest

from insightpilot.core.domain.connection import ConnectionStatus
from insightpilot.core.domain.errors import (
    AlreadyInProgressError,
    StoreError,
    ValidationError,
)
from insightpilot.core.services.probe import ConnectionProbe
from insightpilot.core.services.registry import ConnectionRegistry
from insightpilot.utils.metrics import get_metrics


async def wait_started(factory):
    """Espera a que el adaptador falso esté bloqueado en su hilo"""
    await asyncio.to_thread(factory.started.wait, 5)


@pytest.mark.unit
class TestConnectionProbe:
    """Resultados de ConnectionProbe.test()"""

    @pytest.mark.asyncio
    async def test_reachable_backend_connects(self, registry, profile, adapter_factory):
        probe = ConnectionProbe(registry, adapter_factory, timeout=2)
        assert await probe.test(profile.id) is True
        assert registry.get(profile.id).status == ConnectionStatus.CONNECTED
        assert get_metrics().probes_total["connected"] == 1

    @pytest.mark.asyncio
    async def test_unreachable_backend_disconnects(self, registry, profile, adapter_factory):
        adapter_factory.reachable = False
        probe = ConnectionProbe(registry, adapter_factory, timeout=2)
        assert await probe.test(profile.id) is False
        assert registry.get(profile.id).status == ConnectionStatus.DISCONNECTED

    @pytest.mark.asyncio
    async def test_adapter_exception_disconnects(self, registry, profile, adapter_factory):
        adapter_factory.reachable = RuntimeError("auth failed")
        probe = ConnectionProbe(registry, adapter_factory, timeout=2)
        assert await probe.test(profile.id) is False
        assert registry.get(profile.id).status == ConnectionStatus.DISCONNECTED

    @pytest.mark.asyncio
    async def test_timeout_disconnects(self, registry, profile, adapter_factory):
        adapter_factory.block()
        probe = ConnectionProbe(registry, adapter_factory, timeout=0.2)
        assert await probe.test(profile.id) is False
        assert registry.get(profile.id).status == ConnectionStatus.DISCONNECTED
        adapter_factory.release()

    @pytest.mark.asyncio
    async def test_invalid_profile_skips_network(self, store, registry, profile, adapter_factory):
        # Perfil inválido escrito directamente en el store
        data = store.get("connections")
        data[0]["host"] = ""
        store.set("connections", data)
        registry._load()

        probe = ConnectionProbe(registry, adapter_factory, timeout=2)
        with pytest.raises(ValidationError):
            await probe.test(profile.id)
        assert adapter_factory.profiles == []
        assert registry.get(profile.id).status == ConnectionStatus.DISCONNECTED

    @pytest.mark.asyncio
    async def test_testing_while_in_flight(self, registry, profile, adapter_factory):
        adapter_factory.block()
        probe = ConnectionProbe(registry, adapter_factory, timeout=5)
        task = asyncio.create_task(probe.test(profile.id))
        await wait_started(adapter_factory)

        assert registry.get(profile.id).status == ConnectionStatus.TESTING
        with pytest.raises(AlreadyInProgressError):
            await probe.test(profile.id)

        adapter_factory.release()
        assert await task is True
        assert registry.get(profile.id).status == ConnectionStatus.CONNECTED

    @pytest.mark.asyncio
    async def test_cancel_resolves_disconnected(self, registry, profile, adapter_factory):
        adapter_factory.block()
        probe = ConnectionProbe(registry, adapter_factory, timeout=5)
        task = asyncio.create_task(probe.test(profile.id))
        await wait_started(adapter_factory)

        assert probe.cancel(profile.id) is True
        assert await task is False
        assert registry.get(profile.id).status == ConnectionStatus.DISCONNECTED
        assert not probe.in_progress(profile.id)
        adapter_factory.release()

    @pytest.mark.asyncio
    async def test_cancel_without_probe(self, registry, profile, adapter_factory):
        probe = ConnectionProbe(registry, adapter_factory, timeout=2)
        assert probe.cancel(profile.id) is False

    @pytest.mark.asyncio
    async def test_caller_cancellation_propagates(self, registry, profile, adapter_factory):
        adapter_factory.block()
        probe = ConnectionProbe(registry, adapter_factory, timeout=5)
        task = asyncio.create_task(probe.test(profile.id))
        await wait_started(adapter_factory)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert registry.get(profile.id).status == ConnectionStatus.DISCONNECTED
        adapter_factory.release()

    @pytest.mark.asyncio
    async def test_edit_during_probe_discards_result(self, registry, profile, adapter_factory):
        adapter_factory.block()
        probe = ConnectionProbe(registry, adapter_factory, timeout=5)
        task = asyncio.create_task(probe.test(profile.id))
        await wait_started(adapter_factory)

        registry.update(profile.id, host="otro.local")
        adapter_factory.release()
        await task
        assert registry.get(profile.id).status == ConnectionStatus.DISCONNECTED

    @pytest.mark.asyncio
    async def test_distinct_profiles_run_concurrently(self, registry, profile_fields, adapter_factory):
        first = registry.add(**profile_fields)
        second = registry.add(**{**profile_fields, "name": "Otra"})
        probe = ConnectionProbe(registry, adapter_factory, timeout=2)

        results = await asyncio.gather(probe.test(first.id), probe.test(second.id))
        assert results == [True, True]
        assert all(p.status == ConnectionStatus.CONNECTED for p in registry.list())


@pytest.mark.unit
class TestConnectionTestWithFailingStore:
    """Un store caído no deja perfiles atascados en 'testing'"""

    @pytest.mark.asyncio
    async def test_store_failure_on_result_leaves_memory_resolved(
        self, failing_store, profile_fields, adapter_factory
    ):
        registry = ConnectionRegistry(failing_store)
        profile = registry.add(**profile_fields)
        adapter_factory.block()
        probe = ConnectionProbe(registry, adapter_factory, timeout=5)
        task = asyncio.create_task(probe.test(profile.id))
        await wait_started(adapter_factory)

        failing_store.fail = True
        adapter_factory.release()
        with pytest.raises(StoreError):
            await task

        assert registry.get(profile.id).status == ConnectionStatus.CONNECTED
        assert not probe.in_progress(profile.id)
        assert get_metrics().probes_total["connected"] == 1

        # El perfil se puede volver a probar cuando el store se recupera
        failing_store.fail = False
        assert await probe.test(profile.id) is True
        assert failing_store.get("connections")[0]["status"] == "connected"

    @pytest.mark.asyncio
    async def test_store_failure_on_cancel_leaves_memory_disconnected(
        self, failing_store, profile_fields, adapter_factory
    ):
        registry = ConnectionRegistry(failing_store)
        profile = registry.add(**profile_fields)
        adapter_factory.block()
        probe = ConnectionProbe(registry, adapter_factory, timeout=5)
        task = asyncio.create_task(probe.test(profile.id))
        await wait_started(adapter_factory)

        failing_store.fail = True
        assert probe.cancel(profile.id) is True
        with pytest.raises(StoreError):
            await task
        adapter_factory.release()

        assert registry.get(profile.id).status == ConnectionStatus.DISCONNECTED
        assert not probe.in_progress(profile.id)

        failing_store.fail = False
        adapter_factory.gate = None
        assert await probe.test(profile.id) is True

    def test_store_failure_outside_testing_keeps_memory(self, failing_store, profile_fields):
        registry = ConnectionRegistry(failing_store)
        profile = registry.add(**profile_fields)
        failing_store.fail = True
        with pytest.raises(StoreError):
            registry.set_status(profile.id, ConnectionStatus.CONNECTED)
        assert registry.get(profile.id).status == ConnectionStatus.DISCONNECTED
