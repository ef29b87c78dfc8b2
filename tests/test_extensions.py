# tests/test_extensions.py
import pytest

from ssx_auth.application.extensions import Extension, ExtensionPipeline
from ssx_auth.domain.value_objects import ConfigOverrides


class RecordingExtension(Extension):
    def __init__(self, name, log, namespace=None, siwe=None, actions=None, targeted=None, fields=None):
        self.name = name
        self.log = log
        self.namespace = namespace
        self._siwe = siwe
        self._actions = actions
        self._targeted = targeted
        self._fields = fields

    async def after_connect(self, strategy):
        self.log.append(("after_connect", self.name))
        return ConfigOverrides(siwe=self._siwe) if self._siwe is not None else None

    async def default_actions(self):
        self.log.append(("default_actions", self.name))
        return self._actions

    async def targeted_actions(self):
        self.log.append(("targeted_actions", self.name))
        return self._targeted

    async def extra_fields(self):
        self.log.append(("extra_fields", self.name))
        return self._fields

    async def after_sign_in(self, session):
        self.log.append(("after_sign_in", self.name))


class FailingConnect(Extension):
    async def after_connect(self, strategy):
        raise RuntimeError("extension exploded")


async def _fold(pipeline, strategy=None):
    recorded = {}
    async for overrides in pipeline.fold_after_connect(strategy):
        recorded = overrides
    return recorded


@pytest.mark.asyncio
async def test_phases_do_not_interleave():
    log = []
    pipeline = ExtensionPipeline()
    pipeline.extend(RecordingExtension("a", log, namespace="ns"))
    pipeline.extend(RecordingExtension("b", log, namespace="ns"))

    await _fold(pipeline)
    await pipeline.collect_capabilities()

    assert log == [
        ("after_connect", "a"),
        ("after_connect", "b"),
        ("default_actions", "a"),
        ("default_actions", "b"),
        ("targeted_actions", "a"),
        ("targeted_actions", "b"),
        ("extra_fields", "a"),
        ("extra_fields", "b"),
    ]


@pytest.mark.asyncio
async def test_after_connect_later_registration_wins():
    log = []
    pipeline = ExtensionPipeline()
    pipeline.extend(RecordingExtension("a", log, siwe={"domain": "a.example", "statement": "from a"}))
    pipeline.extend(RecordingExtension("b", log))
    pipeline.extend(RecordingExtension("c", log, siwe={"domain": "c.example"}))

    overrides = await _fold(pipeline)

    assert overrides == {"domain": "c.example", "statement": "from a"}


@pytest.mark.asyncio
async def test_after_connect_failure_keeps_earlier_steps():
    log = []
    pipeline = ExtensionPipeline()
    pipeline.extend(RecordingExtension("a", log, siwe={"domain": "a.example"}))
    pipeline.extend(FailingConnect())
    pipeline.extend(RecordingExtension("c", log, siwe={"domain": "c.example"}))

    recorded = {}
    with pytest.raises(RuntimeError, match="exploded"):
        async for overrides in pipeline.fold_after_connect(None):
            recorded = overrides

    assert recorded == {"domain": "a.example"}
    assert ("after_connect", "c") not in log


@pytest.mark.asyncio
async def test_capabilities_accumulate_and_are_idempotent():
    log = []
    pipeline = ExtensionPipeline()
    pipeline.extend(
        RecordingExtension(
            "a", log, namespace="kepler",
            actions=["get", "put"],
            targeted={"kv://x": ["get"]},
            fields={"space": "default"},
        )
    )
    pipeline.extend(
        RecordingExtension(
            "b", log, namespace="kepler",
            actions=["put", "list"],
            targeted={"kv://x": ["del"], "kv://y": ["get"]},
            fields={"owner": "alice"},
        )
    )
    pipeline.extend(RecordingExtension("c", log, namespace="other", actions=["read"]))

    first = await pipeline.collect_capabilities()
    second = await pipeline.collect_capabilities()

    assert first == second
    assert first.default_actions == {"kepler": ["get", "put", "list"], "other": ["read"]}
    assert first.targeted_actions == {"kepler": {"kv://x": ["get", "del"], "kv://y": ["get"]}}
    assert first.extra_fields == {"kepler": {"space": "default", "owner": "alice"}}


@pytest.mark.asyncio
async def test_capability_hooks_skip_extensions_without_namespace():
    log = []
    pipeline = ExtensionPipeline()
    pipeline.extend(RecordingExtension("anon", log, actions=["get"]))

    caps = await pipeline.collect_capabilities()

    assert caps.is_empty()
    assert log == []


@pytest.mark.asyncio
async def test_after_sign_in_runs_in_order():
    log = []
    pipeline = ExtensionPipeline()
    pipeline.extend(RecordingExtension("a", log))
    pipeline.extend(RecordingExtension("b", log))

    await pipeline.after_sign_in(session=None)

    assert log == [("after_sign_in", "a"), ("after_sign_in", "b")]


def test_is_enabled_and_order():
    pipeline = ExtensionPipeline()
    first = RecordingExtension("a", [], namespace="delegationRegistry")
    second = RecordingExtension("b", [])
    pipeline.extend(first)
    pipeline.extend(second)

    assert pipeline.is_enabled("delegationRegistry")
    assert not pipeline.is_enabled("kepler")
    assert list(pipeline) == [first, second]
    assert len(pipeline) == 2


@pytest.mark.asyncio
async def test_base_extension_contributes_nothing():
    pipeline = ExtensionPipeline()
    pipeline.extend(Extension())

    assert await _fold(pipeline) == {}
    assert (await pipeline.collect_capabilities()).is_empty()
