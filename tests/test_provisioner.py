"""Tests for one-shot auto-provisioning of missing essays."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from fakes import EDITOR, VIEWER, make_essay
from green_essays.domains.essays.entities import ActingUser, ResolvedEssay
from green_essays.domains.essays.provisioner import AutoProvisioner
from green_essays.domains.essays.resolver import resolve


def _template(section="future", slug="new-essay", user=EDITOR):
    return resolve(section, slug, [], loading=False, acting_user=user)


class TestShouldProvision:
    """All trigger conditions must hold."""

    def test_all_conditions(self, repository):
        provisioner = AutoProvisioner(repository)

        assert provisioner.should_provision(False, _template(), "future", "new-essay", EDITOR) is True

    def test_not_while_loading(self, repository):
        provisioner = AutoProvisioner(repository)

        assert provisioner.should_provision(True, _template(), "future", "new-essay", EDITOR) is False

    def test_not_for_real_essay(self, repository):
        provisioner = AutoProvisioner(repository)
        resolved = ResolvedEssay.real(make_essay(slug="new-essay"))

        assert provisioner.should_provision(False, resolved, "future", "new-essay", EDITOR) is False

    def test_not_for_viewer(self, repository):
        provisioner = AutoProvisioner(repository)

        assert provisioner.should_provision(False, _template(user=VIEWER), "future", "new-essay", VIEWER) is False

    def test_not_without_identity(self, repository):
        provisioner = AutoProvisioner(repository)
        nameless = ActingUser(is_privileged=True, identity=None)

        assert provisioner.should_provision(False, _template(user=nameless), "future", "new-essay", nameless) is False


class TestObserve:
    """At most one create per (section, slug) for the life of the page."""

    @pytest.mark.asyncio
    async def test_creates_once(self, repository):
        provisioner = AutoProvisioner(repository)

        essay = await provisioner.observe(False, _template(), "future", "new-essay", EDITOR)

        assert essay is not None
        assert essay.slug == "new-essay"
        assert len(repository.create_calls) == 1

    @pytest.mark.asyncio
    async def test_payload(self, repository):
        provisioner = AutoProvisioner(repository)

        await provisioner.observe(False, _template(), "future", "new-essay", EDITOR)
        payload = repository.create_calls[0]

        assert payload["section"] == "future"
        assert payload["slug"] == "new-essay"
        assert payload["title"] == "New Essay"
        assert payload["author_name"] == "ed"
        assert payload["status"] == "draft"
        assert payload["version"] == 1
        assert payload["updated_by"] == "ed@x.com"
        assert payload["content_json"]["type"] == "doc"

    @pytest.mark.asyncio
    async def test_concurrent_observers_share_request(self, repository):
        repository.create_delay = 0.05
        provisioner = AutoProvisioner(repository)

        results = await asyncio.gather(*[
            provisioner.observe(False, _template(), "future", "new-essay", EDITOR)
            for _ in range(3)
        ])

        assert len(repository.create_calls) == 1
        assert results[0] is not None
        assert all(result is results[0] for result in results)

    @pytest.mark.asyncio
    async def test_in_flight_flag(self, repository):
        repository.create_delay = 0.05
        provisioner = AutoProvisioner(repository)

        task = asyncio.ensure_future(provisioner.observe(False, _template(), "future", "new-essay", EDITOR))
        await asyncio.sleep(0.01)
        assert provisioner.is_provisioning("future", "new-essay") is True

        await task
        await asyncio.sleep(0)
        assert provisioner.is_provisioning("future", "new-essay") is False

    @pytest.mark.asyncio
    async def test_repeated_observation_does_not_recreate(self, repository):
        provisioner = AutoProvisioner(repository)

        await provisioner.observe(False, _template(), "future", "new-essay", EDITOR)
        again = await provisioner.observe(False, _template(), "future", "new-essay", EDITOR)

        assert again is None
        assert len(repository.create_calls) == 1

    @pytest.mark.asyncio
    async def test_different_slugs_each_create(self, repository):
        provisioner = AutoProvisioner(repository)

        await provisioner.observe(False, _template(slug="one"), "future", "one", EDITOR)
        await provisioner.observe(False, _template(slug="two"), "future", "two", EDITOR)

        assert [call["slug"] for call in repository.create_calls] == ["one", "two"]

    @pytest.mark.asyncio
    async def test_viewer_never_creates(self, repository):
        provisioner = AutoProvisioner(repository)

        essay = await provisioner.observe(False, _template(user=VIEWER), "future", "new-essay", VIEWER)

        assert essay is None
        assert repository.create_calls == []


class TestProvisionFailure:
    """A failed create is recorded and never retried within the same page."""

    @pytest.mark.asyncio
    async def test_failure_recorded(self, repository):
        repository.fail_create = True
        provisioner = AutoProvisioner(repository)

        essay = await provisioner.observe(False, _template(), "future", "new-essay", EDITOR)

        assert essay is None
        assert ("future", "new-essay") in provisioner.failures
        assert "new-essay" in str(provisioner.failures[("future", "new-essay")])

    @pytest.mark.asyncio
    async def test_no_retry(self, repository):
        repository.fail_create = True
        provisioner = AutoProvisioner(repository)

        await provisioner.observe(False, _template(), "future", "new-essay", EDITOR)
        repository.fail_create = False
        await provisioner.observe(False, _template(), "future", "new-essay", EDITOR)

        assert len(repository.create_calls) == 1

    @pytest.mark.asyncio
    async def test_new_provisioner_retries(self, repository):
        repository.fail_create = True
        await AutoProvisioner(repository).observe(False, _template(), "future", "new-essay", EDITOR)

        repository.fail_create = False
        essay = await AutoProvisioner(repository).observe(False, _template(), "future", "new-essay", EDITOR)

        assert essay is not None
        assert len(repository.create_calls) == 2


class TestRepositoryContract:

    @pytest.mark.asyncio
    async def test_create_awaited_with_payload(self):
        repository = AsyncMock()
        repository.create.return_value = make_essay(slug="new-essay")
        provisioner = AutoProvisioner(repository)

        await provisioner.observe(False, _template(), "future", "new-essay", EDITOR)
        await provisioner.observe(False, _template(), "future", "new-essay", EDITOR)

        repository.create.assert_awaited_once_with(AutoProvisioner.build_payload("future", "new-essay", EDITOR))
