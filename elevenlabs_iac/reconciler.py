"""Sequence create/read/update/delete calls to converge remote state.

Each managed entity moves between three states: Absent (no record), Present
(record with identifier) and Gone (a read found the entity deleted
remotely; the record is dropped and the caller decides whether to apply
again). Nothing here retries; every failure propagates to the caller.
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import Any, ClassVar

from pydantic import BaseModel

from elevenlabs_iac.exceptions import ConfigurationError
from elevenlabs_iac.state import StateRecord, StateStore
from elevenlabs_iac.transport import Transport

logger = logging.getLogger(__name__)


class ManagedResource:
    """Adapter between the reconciler and one entity kind's service."""

    kind: ClassVar[str] = ""
    config_model: ClassVar[type[BaseModel]]
    # Immutable kinds never update in place: any change means delete + create.
    immutable: ClassVar[bool] = False

    def __init__(self, transport: Transport):
        self.transport = transport

    def load(self, data: dict[str, Any]) -> BaseModel:
        return self.config_model.model_validate(data)

    def encode(self, config: BaseModel) -> dict[str, Any]:
        raise NotImplementedError

    def create(
        self, config: BaseModel, cancel: threading.Event | None = None
    ) -> tuple[str, dict[str, Any]]:
        """Create the entity; return its identifier and any computed attributes."""
        raise NotImplementedError

    def read(
        self,
        resource_id: str,
        previous: BaseModel | None,
        cancel: threading.Event | None = None,
    ) -> BaseModel | None:
        """Return the observed config, or ``None`` when the entity is gone.

        ``previous`` is ``None`` when an existing entity is being adopted
        without a config.
        """
        raise NotImplementedError

    def update(
        self,
        resource_id: str,
        payload: dict[str, Any],
        cancel: threading.Event | None = None,
    ) -> None:
        raise ConfigurationError(f"{self.kind} resources cannot be updated in place")

    def delete(
        self,
        resource_id: str,
        previous: BaseModel,
        cancel: threading.Event | None = None,
    ) -> None:
        raise NotImplementedError

    def diff(self, previous: BaseModel | None, desired: BaseModel) -> dict[str, Any] | None:
        if previous is not None and self.encode(previous) == self.encode(desired):
            return None
        return self.encode(desired)

    def needs_replacement(
        self, previous: BaseModel, desired: BaseModel, computed: dict[str, Any]
    ) -> bool:
        if self.immutable:
            return self.encode(previous) != self.encode(desired)
        return False

    def computed_for(self, config: BaseModel) -> dict[str, Any]:
        """Computed attributes recorded when adopting an existing entity."""
        return {}

    def drifted(self, applied: BaseModel, observed: BaseModel) -> bool:
        """True when a field the caller set reads back with a different value.

        Fields only present in ``observed`` are server-side defaults and do
        not count as drift.
        """
        return not _subset_matches(self.encode(applied), self.encode(observed))


def _subset_matches(expected: Any, actual: Any) -> bool:
    if isinstance(expected, dict):
        if not isinstance(actual, dict):
            return False
        return all(
            key in actual and _subset_matches(value, actual[key])
            for key, value in expected.items()
        )
    return expected == actual


class Action(str, enum.Enum):
    CREATE = "create"
    UPDATE = "update"
    REPLACE = "replace"
    DELETE = "delete"
    NOOP = "noop"


class Plan(BaseModel):
    address: str
    kind: str
    action: Action
    payload: dict[str, Any] | None = None


class Reconciler:
    def __init__(self, resources: dict[str, ManagedResource], store: StateStore):
        self._resources = resources
        self._store = store

    @property
    def store(self) -> StateStore:
        return self._store

    def resource(self, kind: str) -> ManagedResource:
        try:
            return self._resources[kind]
        except KeyError:
            raise ConfigurationError(f"Unknown resource kind '{kind}'") from None

    def refresh(
        self, address: str, cancel: threading.Event | None = None
    ) -> BaseModel | None:
        """Read the entity behind ``address`` and record what was observed.

        A vanished entity drops the record and returns ``None``; it is not
        re-created here.
        """
        record = self._store.get(address)
        if record is None:
            return None
        resource = self.resource(record.kind)
        previous = resource.load(record.applied)
        observed = resource.read(record.id, previous, cancel)
        if observed is None:
            logger.warning(
                "%s '%s' (%s) no longer exists remotely; removing from state",
                record.kind, address, record.id,
            )
            self._store.remove(address)
            return None
        record.observed = observed.model_dump(mode="json")
        self._store.put(record)
        return observed

    def plan(self, address: str, kind: str, desired: BaseModel | None) -> Plan:
        record = self._store.get(address)
        resource = self.resource(kind)

        if desired is None:
            action = Action.DELETE if record is not None else Action.NOOP
            return Plan(address=address, kind=kind, action=action)
        if record is None:
            return Plan(
                address=address, kind=kind, action=Action.CREATE,
                payload=resource.encode(desired),
            )
        if record.kind != kind:
            raise ConfigurationError(
                f"'{address}' is a {record.kind} resource, not {kind}"
            )

        applied = resource.load(record.applied)
        if resource.needs_replacement(applied, desired, record.computed):
            return Plan(
                address=address, kind=kind, action=Action.REPLACE,
                payload=resource.encode(desired),
            )

        payload = resource.diff(applied, desired)
        if payload is None and record.observed is not None:
            observed = resource.load(record.observed)
            if resource.drifted(applied, observed):
                logger.info("Drift detected on %s '%s'", kind, address)
                if resource.immutable:
                    return Plan(
                        address=address, kind=kind, action=Action.REPLACE,
                        payload=resource.encode(desired),
                    )
                payload = resource.diff(None, desired)

        if payload is None:
            return Plan(address=address, kind=kind, action=Action.NOOP)
        return Plan(address=address, kind=kind, action=Action.UPDATE, payload=payload)

    def apply(
        self,
        address: str,
        kind: str,
        desired: BaseModel | None,
        cancel: threading.Event | None = None,
    ) -> Plan:
        """Converge ``address`` towards ``desired`` and return the executed plan.

        A ``desired`` of ``None`` means the entity should no longer exist.
        """
        plan = self.plan(address, kind, desired)
        resource = self.resource(kind)

        if plan.action is Action.DELETE:
            self.destroy(address, cancel)
        elif plan.action is Action.CREATE:
            self._create(address, resource, desired, cancel)
        elif plan.action is Action.REPLACE:
            logger.info("Replacing %s '%s'", kind, address)
            self.destroy(address, cancel)
            self._create(address, resource, desired, cancel)
        elif plan.action is Action.UPDATE:
            record = self._store.get(address)
            resource.update(record.id, plan.payload, cancel)
            logger.info("Updated %s '%s' (%s)", kind, address, record.id)
            record.applied = desired.model_dump(mode="json")
            record.observed = None
            self._store.put(record)
            self.refresh(address, cancel)
        return plan

    def _create(
        self,
        address: str,
        resource: ManagedResource,
        desired: BaseModel,
        cancel: threading.Event | None,
    ) -> None:
        resource_id, computed = resource.create(desired, cancel)
        logger.info("Created %s '%s' (%s)", resource.kind, address, resource_id)
        self._store.put(
            StateRecord(
                address=address,
                kind=resource.kind,
                id=resource_id,
                applied=desired.model_dump(mode="json"),
                computed=computed,
            )
        )
        self.refresh(address, cancel)

    def import_(
        self,
        address: str,
        kind: str,
        resource_id: str,
        config: BaseModel | None = None,
        cancel: threading.Event | None = None,
    ) -> BaseModel:
        """Start managing an entity that already exists remotely.

        The entity is read by id and recorded at ``address`` as if it had
        been applied. Without ``config`` the observed config becomes the
        applied one; kinds whose sources the platform does not return
        (voices, text and file documents) need ``config`` to be adopted.
        """
        if self._store.get(address) is not None:
            raise ConfigurationError(f"'{address}' is already managed")
        resource = self.resource(kind)
        observed = resource.read(resource_id, config, cancel)
        if observed is None:
            raise ConfigurationError(f"{kind} '{resource_id}' does not exist")

        applied = config if config is not None else observed
        self._store.put(
            StateRecord(
                address=address,
                kind=kind,
                id=resource_id,
                applied=applied.model_dump(mode="json"),
                observed=observed.model_dump(mode="json"),
                computed=resource.computed_for(applied),
            )
        )
        logger.info("Imported %s '%s' (%s)", kind, address, resource_id)
        return observed

    def destroy(self, address: str, cancel: threading.Event | None = None) -> bool:
        """Delete the entity behind ``address``. Returns False if nothing was tracked."""
        record = self._store.get(address)
        if record is None:
            return False
        resource = self.resource(record.kind)
        resource.delete(record.id, resource.load(record.applied), cancel)
        logger.info("Deleted %s '%s' (%s)", record.kind, address, record.id)
        self._store.remove(address)
        return True
