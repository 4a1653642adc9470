from green_essays.domains.essays.entities import (
    ActingUser, Essay, EssayKind, EssayStatus, EssayVersion, ResolvedEssay
)
from green_essays.domains.essays.exceptions import (
    EssayError, RepositoryError, LoadFailure, ProvisionFailure,
    SaveFailure, PublicationFailure
)
from green_essays.domains.essays.resolver import resolve, build_template
from green_essays.domains.essays.provisioner import AutoProvisioner
from green_essays.domains.essays.publication import PublicationStateMachine
from green_essays.domains.essays.edit_session import EditSession, initial_edit_mode
from green_essays.domains.essays.services import EssayService
from green_essays.domains.essays.page import EssayPage, PageState

__all__ = [
    "ActingUser", "Essay", "EssayKind", "EssayStatus", "EssayVersion", "ResolvedEssay",
    "EssayError", "RepositoryError", "LoadFailure", "ProvisionFailure",
    "SaveFailure", "PublicationFailure",
    "resolve", "build_template",
    "AutoProvisioner", "PublicationStateMachine",
    "EditSession", "initial_edit_mode",
    "EssayService", "EssayPage", "PageState"
]
