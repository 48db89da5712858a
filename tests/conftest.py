"""Pytest fixtures for QuillGate tests."""

from __future__ import annotations

from collections import Counter
from contextlib import asynccontextmanager
from copy import copy
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from quillgate.application.services import AuditRecorder, GrantResolver
from quillgate.domain.entities import (
    AuditLog,
    ConfigurationVersion,
    DataPermissionRule,
    Permission,
    Role,
    RolePermission,
    SystemConfiguration,
    TemporaryPermission,
    User,
)
from quillgate.domain.exceptions import ConcurrentModification
from quillgate.domain.value_objects import (
    ApprovalStatus,
    AuditResult,
    PermissionAction,
    RiskLevel,
)
from quillgate.infrastructure.permission.permission_checker import GovernedPermissionChecker
from quillgate.infrastructure.rules import ConditionRuleEngine, RuleCache

NOW = datetime(2024, 1, 3, 12, 0, tzinfo=UTC)
_ACTIONS = {a.value for a in PermissionAction}
TEST_USER_ID = "test-user-1"


def _check_version(stored, entity, label: str) -> None:
    if stored.row_version != entity.row_version:
        raise ConcurrentModification(f"{label} was modified concurrently")
    entity.row_version += 1


# --- Fake repositories ---


class FakeUserRepository:
    """In-memory identity lookup."""

    def __init__(self) -> None:
        self._by_id: dict[str, User] = {}

    async def get_by_id(self, user_id: str) -> User | None:
        return copy(self._by_id.get(user_id))

    def add_user(self, user: User) -> None:
        """Helper to add user for tests."""
        self._by_id[user.id] = user


class FakeRoleRepository:
    """In-memory role repository."""

    def __init__(self) -> None:
        self._by_id: dict[UUID, Role] = {}

    async def get_by_id(self, role_id: UUID, include_deleted: bool = False) -> Role | None:
        role = self._by_id.get(role_id)
        if not role or (not include_deleted and role.deleted_at):
            return None
        return copy(role)

    async def get_by_name(self, name: str, include_deleted: bool = False) -> Role | None:
        for role in self._by_id.values():
            if role.normalized_name == Role.normalize(name):
                if include_deleted or role.deleted_at is None:
                    return copy(role)
        return None

    async def list_by_ids(self, role_ids: list[UUID], include_deleted: bool = False) -> list[Role]:
        return [
            r
            for r in self._by_id.values()
            if r.id in role_ids and (include_deleted or r.deleted_at is None)
        ]

    async def soft_delete(self, role_id: UUID) -> None:
        role = self._by_id.get(role_id)
        if role:
            role.deleted_at = datetime.now(UTC)
            role.is_active = False

    def add_role(self, role: Role) -> None:
        """Helper to add role for tests."""
        self._by_id[role.id] = role


class FakePermissionRepository:
    """In-memory permission catalog."""

    def __init__(self) -> None:
        self._by_id: dict[UUID, Permission] = {}

    async def get_by_id(self, permission_id: UUID) -> Permission | None:
        return self._by_id.get(permission_id)

    async def get_by_name(self, name: str) -> Permission | None:
        for p in self._by_id.values():
            if p.name == name:
                return p
        return None

    async def list_by_ids(self, permission_ids: list[UUID]) -> list[Permission]:
        return [p for p in self._by_id.values() if p.id in permission_ids]

    def add_permission(self, permission: Permission) -> None:
        self._by_id[permission.id] = permission


class FakeRolePermissionRepository:
    """In-memory role permission rows, keyed by (role_id, permission_id)."""

    def __init__(self, permissions: FakePermissionRepository) -> None:
        self._rows: dict[tuple[UUID, UUID], RolePermission] = {}
        self._permissions = permissions

    async def get(self, role_id: UUID, permission_id: UUID) -> RolePermission | None:
        return copy(self._rows.get((role_id, permission_id)))

    async def list_by_role(
        self, role_id: UUID, include_inactive: bool = False
    ) -> list[RolePermission]:
        return [
            copy(rp)
            for rp in self._rows.values()
            if rp.role_id == role_id and (include_inactive or rp.is_active)
        ]

    async def list_effective_permissions(
        self, role_ids: list[UUID], as_of: datetime
    ) -> list[Permission]:
        ids = {
            rp.permission_id
            for rp in self._rows.values()
            if rp.role_id in role_ids and rp.is_effective(as_of)
        }
        return await self._permissions.list_by_ids(list(ids))

    async def create(self, role_permission: RolePermission) -> RolePermission:
        self._rows[(role_permission.role_id, role_permission.permission_id)] = role_permission
        return role_permission

    async def update(self, role_permission: RolePermission) -> None:
        key = (role_permission.role_id, role_permission.permission_id)
        _check_version(self._rows[key], role_permission, "RolePermission")
        self._rows[key] = role_permission


class FakeTemporaryPermissionRepository:
    """In-memory temporary grants."""

    def __init__(self) -> None:
        self._by_id: dict[UUID, TemporaryPermission] = {}

    async def get_by_id(self, grant_id: UUID) -> TemporaryPermission | None:
        return copy(self._by_id.get(grant_id))

    async def list_by_user(self, user_id: str) -> list[TemporaryPermission]:
        return [copy(g) for g in self._by_id.values() if g.user_id == user_id]

    async def list_for_resource_type(
        self, user_id: str, resource_type: str
    ) -> list[TemporaryPermission]:
        return [
            copy(g)
            for g in self._by_id.values()
            if g.user_id == user_id and g.resource_type == resource_type
        ]

    async def list_delegated_from(self, grant_id: UUID) -> list[TemporaryPermission]:
        return [copy(g) for g in self._by_id.values() if g.delegated_from == grant_id]

    async def create(self, grant: TemporaryPermission) -> TemporaryPermission:
        self._by_id[grant.id] = grant
        return grant

    async def update(self, grant: TemporaryPermission) -> None:
        _check_version(self._by_id[grant.id], grant, "TemporaryPermission")
        self._by_id[grant.id] = grant


class FakeDataRuleRepository:
    """In-memory data permission rules with a load counter."""

    def __init__(self) -> None:
        self._by_id: dict[UUID, DataPermissionRule] = {}
        self.list_active_calls = 0

    async def get_by_id(self, rule_id: UUID) -> DataPermissionRule | None:
        return copy(self._by_id.get(rule_id))

    async def list_active(
        self, resource_type: str, operation: PermissionAction
    ) -> list[DataPermissionRule]:
        self.list_active_calls += 1
        return [
            copy(r)
            for r in self._by_id.values()
            if r.resource_type == resource_type and r.operation == operation and r.is_active
        ]

    async def list(
        self, *, resource_type: str | None = None, include_inactive: bool = False
    ) -> list[DataPermissionRule]:
        return [
            copy(r)
            for r in self._by_id.values()
            if (resource_type is None or r.resource_type == resource_type)
            and (include_inactive or r.is_active)
        ]

    async def create(self, rule: DataPermissionRule) -> DataPermissionRule:
        self._by_id[rule.id] = rule
        return rule

    async def update(self, rule: DataPermissionRule) -> None:
        _check_version(self._by_id[rule.id], rule, "DataPermissionRule")
        self._by_id[rule.id] = rule


class FakeAuditLogRepository:
    """In-memory audit log. Appends stay pending until the unit of work commits."""

    def __init__(self) -> None:
        self.entries: list[AuditLog] = []
        self._pending: list[AuditLog] = []

    async def append(self, entry: AuditLog) -> AuditLog:
        self._pending.append(entry)
        return entry

    async def get_by_id(self, audit_log_id: UUID) -> AuditLog | None:
        for e in self.entries + self._pending:
            if e.id == audit_log_id:
                return e
        return None

    async def list(
        self,
        *,
        user_id: str | None = None,
        resource_type: str | None = None,
        resource_id: str | None = None,
        correlation_id: UUID | None = None,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[AuditLog], str | None]:
        items = [
            e
            for e in self.entries
            if (user_id is None or e.user_id == user_id)
            and (resource_type is None or e.resource_type == resource_type)
            and (resource_id is None or e.resource_id == resource_id)
            and (correlation_id is None or e.correlation_id == correlation_id)
        ]
        items.reverse()
        start = int(cursor) if cursor else 0
        page = items[start : start + limit + 1]
        next_cursor = str(start + limit) if len(page) > limit else None
        return page[:limit], next_cursor

    async def archive_before(self, before: datetime, archived_at: datetime) -> int:
        count = 0
        for e in self.entries:
            if e.created_at < before and not e.is_archived:
                e.is_archived = True
                e.archived_at = archived_at
                count += 1
        return count

    async def summarize(
        self, start: datetime, end: datetime
    ) -> list[tuple[str, AuditResult, RiskLevel, int]]:
        counts = Counter(
            (e.category, e.result, e.risk_level)
            for e in self.entries
            if start <= e.created_at < end
        )
        return [(*key, count) for key, count in counts.items()]

    def flush(self) -> None:
        self.entries.extend(self._pending)
        self._pending = []

    def discard(self) -> None:
        self._pending = []

    def actions(self) -> list[str]:
        """Committed entry actions, oldest first."""
        return [e.action for e in self.entries]


class FakeConfigurationRepository:
    """In-memory system configuration repository."""

    def __init__(self) -> None:
        self._by_id: dict[UUID, SystemConfiguration] = {}

    async def get_by_id(self, configuration_id: UUID) -> SystemConfiguration | None:
        return copy(self._by_id.get(configuration_id))

    async def get_by_key(self, section: str, key: str) -> SystemConfiguration | None:
        for c in self._by_id.values():
            if c.section == section and c.key == key:
                return copy(c)
        return None

    async def create(self, configuration: SystemConfiguration) -> SystemConfiguration:
        self._by_id[configuration.id] = configuration
        return configuration

    async def update(self, configuration: SystemConfiguration) -> None:
        _check_version(self._by_id[configuration.id], configuration, "SystemConfiguration")
        self._by_id[configuration.id] = configuration


class FakeConfigurationVersionRepository:
    """In-memory configuration version history."""

    def __init__(self) -> None:
        self._by_id: dict[UUID, ConfigurationVersion] = {}

    async def get_by_id(self, version_id: UUID) -> ConfigurationVersion | None:
        return copy(self._by_id.get(version_id))

    async def get_by_number(
        self, configuration_id: UUID, version: int
    ) -> ConfigurationVersion | None:
        for v in self._by_id.values():
            if v.configuration_id == configuration_id and v.version == version:
                return copy(v)
        return None

    async def list_by_configuration(self, configuration_id: UUID) -> list[ConfigurationVersion]:
        return sorted(
            (copy(v) for v in self._by_id.values() if v.configuration_id == configuration_id),
            key=lambda v: v.version,
        )

    async def list_pending(
        self, configuration_id: UUID | None = None
    ) -> list[ConfigurationVersion]:
        return sorted(
            (
                copy(v)
                for v in self._by_id.values()
                if v.approval_status is ApprovalStatus.PENDING
                and (configuration_id is None or v.configuration_id == configuration_id)
            ),
            key=lambda v: (v.created_at, v.version),
        )

    async def next_version_number(self, configuration_id: UUID) -> int:
        versions = await self.list_by_configuration(configuration_id)
        return max((v.version for v in versions), default=0) + 1

    async def create(self, version: ConfigurationVersion) -> ConfigurationVersion:
        self._by_id[version.id] = version
        return version

    async def update(self, version: ConfigurationVersion) -> None:
        _check_version(self._by_id[version.id], version, "ConfigurationVersion")
        self._by_id[version.id] = version

    async def clear_current(self, configuration_id: UUID) -> None:
        for v in self._by_id.values():
            if v.configuration_id == configuration_id:
                v.is_current = False


class FakeResourceAttributeProvider:
    """Stored resource records keyed by (resource_type, resource_id)."""

    def __init__(self) -> None:
        self.records: dict[tuple[str, str], dict] = {}
        self.error: Exception | None = None

    def add(self, resource_type: str, resource_id: str, **attributes) -> None:
        self.records[(resource_type, resource_id)] = attributes

    async def get_attributes(self, resource_type: str, resource_id: str) -> dict | None:
        if self.error is not None:
            raise self.error
        return self.records.get((resource_type, resource_id))


# --- Fake UnitOfWork ---


class FakeUnitOfWork:
    """In-memory Unit of Work with fake repositories.

    Repositories hand out copies, as rows read from a database would be.
    """

    def __init__(self) -> None:
        self.users = FakeUserRepository()
        self.roles = FakeRoleRepository()
        self.permissions = FakePermissionRepository()
        self.role_permissions = FakeRolePermissionRepository(self.permissions)
        self.temporary_permissions = FakeTemporaryPermissionRepository()
        self.data_rules = FakeDataRuleRepository()
        self.audit_logs = FakeAuditLogRepository()
        self.configurations = FakeConfigurationRepository()
        self.configuration_versions = FakeConfigurationVersionRepository()
        self.commits = 0
        self.rollbacks = 0

    async def commit(self) -> None:
        self.commits += 1
        self.audit_logs.flush()

    async def rollback(self) -> None:
        self.rollbacks += 1
        self.audit_logs.discard()

    # --- seeding helpers ---

    def add_user(self, user_id: str, *role_ids: UUID, **kwargs) -> User:
        user = User(
            id=user_id,
            user_name=kwargs.pop("user_name", user_id),
            email=kwargs.pop("email", f"{user_id}@blog.test"),
            role_ids=list(role_ids),
            **kwargs,
        )
        self.users.add_user(user)
        return user

    def add_role(self, name: str, *permission_names: str, is_system: bool = False) -> Role:
        """Role granting the named permissions (created in the catalog when missing)."""
        role = Role(id=uuid4(), name=name, normalized_name=Role.normalize(name), is_system=is_system)
        self.roles.add_role(role)
        for permission_name in permission_names:
            permission = self.permission(permission_name)
            self.role_permissions._rows[(role.id, permission.id)] = RolePermission(
                role_id=role.id,
                permission_id=permission.id,
                granted_at=NOW - timedelta(days=30),
                granted_by="seed",
            )
        return role

    def permission(self, name: str) -> Permission:
        """Catalog permission by name, created when missing."""
        for p in self.permissions._by_id.values():
            if p.name == name:
                return p
        category, _, scope = name.rpartition(".")
        permission = Permission(
            id=uuid4(),
            name=name,
            category=category,
            scope=PermissionAction(scope) if scope in _ACTIONS else PermissionAction.ADMIN,
        )
        self.permissions.add_permission(permission)
        return permission


def make_uow_factory(uow: FakeUnitOfWork):
    """Factory yielding the same UoW; commits on success, rolls back on error."""

    @asynccontextmanager
    async def _factory():
        try:
            yield uow
            await uow.commit()
        except BaseException:
            await uow.rollback()
            raise

    return _factory


def make_grant(
    user_id: str,
    resource_type: str = "reports",
    operation: PermissionAction = PermissionAction.READ,
    *,
    granted_by: str = "admin",
    effective_from: datetime = NOW - timedelta(days=1),
    expires_at: datetime = NOW + timedelta(days=5),
    resource_id: str | None = None,
    delegated_from: UUID | None = None,
    allow_delegation: bool = True,
) -> TemporaryPermission:
    return TemporaryPermission(
        id=uuid4(),
        user_id=user_id,
        resource_type=resource_type,
        operation=operation,
        granted_by=granted_by,
        reason="test",
        effective_from=effective_from,
        expires_at=expires_at,
        created_at=effective_from,
        resource_id=resource_id,
        delegated_from=delegated_from,
        allow_delegation=allow_delegation,
    )


def make_rule(
    conditions: str,
    *,
    resource_type: str = "posts",
    operation: PermissionAction = PermissionAction.WRITE,
    user_id: str | None = None,
    role_id: UUID | None = None,
    effective_from: datetime = NOW - timedelta(days=1),
    effective_to: datetime | None = None,
) -> DataPermissionRule:
    return DataPermissionRule(
        id=uuid4(),
        resource_type=resource_type,
        operation=operation,
        conditions=conditions,
        granted_by="admin",
        effective_from=effective_from,
        effective_to=effective_to,
        created_at=effective_from,
        updated_at=effective_from,
        user_id=user_id,
        role_id=role_id,
    )


class MutableClock:
    """Clock returning a settable instant."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


# --- Fixtures ---


@pytest.fixture
def fake_uow() -> FakeUnitOfWork:
    """Fresh in-memory UnitOfWork for each test."""
    return FakeUnitOfWork()


@pytest.fixture
def uow_factory(fake_uow: FakeUnitOfWork):
    """Factory returning async context manager around the test's FakeUnitOfWork."""
    return make_uow_factory(fake_uow)


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def audit_recorder(clock: MutableClock) -> AuditRecorder:
    return AuditRecorder(clock)


@pytest.fixture
def grant_resolver() -> GrantResolver:
    return GrantResolver("system.super_admin")


@pytest.fixture
def rule_cache() -> RuleCache:
    return RuleCache(ttl_seconds=300.0)


@pytest.fixture
def rule_engine(clock: MutableClock) -> ConditionRuleEngine:
    return ConditionRuleEngine(max_depth=5, clock=clock)


@pytest.fixture
def resource_provider() -> FakeResourceAttributeProvider:
    return FakeResourceAttributeProvider()


@pytest.fixture
def permission_checker(
    uow_factory, rule_engine, rule_cache, audit_recorder, grant_resolver, resource_provider, clock
) -> GovernedPermissionChecker:
    """Real evaluator over the fake unit of work and stored records."""
    return GovernedPermissionChecker(
        unit_of_work_factory=uow_factory,
        rule_engine=rule_engine,
        rule_cache=rule_cache,
        audit_recorder=audit_recorder,
        grant_resolver=grant_resolver,
        resource_provider=resource_provider,
        clock=clock,
    )


@pytest.fixture
def mock_permission_checker():
    """AsyncMock for PermissionChecker - returns True by default."""
    from unittest.mock import AsyncMock

    mock = AsyncMock()
    mock.check.return_value = True
    return mock
