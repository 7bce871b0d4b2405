"""Gmail API client wrapper for filters and labels."""

from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
import logging
from pathlib import Path

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from gmail_filters import gmail_api_models as api
from gmail_filters.errors import AuthError, RemoteError
from gmail_filters.export import LabelMap, export_filters, import_filters
from gmail_filters.filters import Filter
from gmail_filters.labels import GmailLabel, LabelColor

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/gmail.settings.basic",
    "https://www.googleapis.com/auth/gmail.labels",
]


@contextmanager
def _remote_call(what: str) -> Iterator[None]:
    try:
        yield
    except HttpError as e:
        raise RemoteError(f"{what}: {e}") from e


def _api_color(label: GmailLabel) -> api.LabelColor | None:
    if label.color is None:
        return None
    return api.LabelColor(background_color=label.color.background, text_color=label.color.text)


class GmailClient:
    """Reads and mutates the filters and user labels of one Gmail account."""

    def __init__(self, token_file: Path, service_factory: Callable[[Path], object] | None = None):
        self.token_file = token_file
        self.service = (service_factory or self._build_service)(token_file)

    @staticmethod
    def _build_service(token_file: Path):
        try:
            creds = Credentials.from_authorized_user_file(str(token_file), SCOPES)
        except (OSError, ValueError) as e:
            raise AuthError(f"loading Gmail credentials from {token_file}: {e}") from e
        return build("gmail", "v1", credentials=creds)

    # Label operations

    def list_labels(self) -> list[GmailLabel]:
        """List user labels. System labels are never managed and are skipped."""
        logger.debug("Listing labels")
        with _remote_call("listing labels"):
            result = self.service.users().labels().list(userId="me").execute()
        labels = []
        for raw in result.get("labels", []):
            label = api.GmailLabel.model_validate(raw)
            if label.type == api.LabelType.SYSTEM:
                continue
            color = LabelColor(label.color.background_color, label.color.text_color) if label.color else None
            labels.append(GmailLabel(name=label.name, color=color, id=label.id))
        return labels

    def add_labels(self, labels: Sequence[GmailLabel]) -> None:
        for label in labels:
            body = api.CreateLabelRequest(name=label.name, color=_api_color(label))
            logger.debug("Creating label %s", label.name)
            with _remote_call(f'creating label "{label.name}"'):
                self.service.users().labels().create(
                    userId="me", body=body.model_dump(by_alias=True, exclude_none=True)
                ).execute()

    def update_labels(self, labels: Sequence[GmailLabel]) -> None:
        for label in labels:
            if not label.id:
                raise RemoteError(f'cannot update label "{label.name}" without ID')
            body = api.UpdateLabelRequest(name=label.name, color=_api_color(label))
            logger.debug("Updating label %s [%s]", label.name, label.id)
            with _remote_call(f'updating label "{label.name}"'):
                self.service.users().labels().patch(
                    userId="me", id=label.id, body=body.model_dump(by_alias=True, exclude_none=True)
                ).execute()

    def delete_labels(self, ids: Sequence[str]) -> None:
        for label_id in ids:
            logger.debug("Deleting label %s", label_id)
            with _remote_call(f'deleting label "{label_id}"'):
                self.service.users().labels().delete(userId="me", id=label_id).execute()

    # Filter operations

    def list_filters(self) -> list[Filter]:
        """List all Gmail filters, translated to the internal representation."""
        logger.debug("Listing filters")
        with _remote_call("listing filters"):
            result = self.service.users().settings().filters().list(userId="me").execute()
        gmail_filters = [api.GmailFilter.model_validate(f) for f in result.get("filter", [])]
        return import_filters(gmail_filters, LabelMap(self.list_labels()))

    def add_filters(self, filters: Sequence[Filter]) -> None:
        # Labels may have been created earlier in the same run, so resolve IDs now
        exported = export_filters(filters, LabelMap(self.list_labels()))
        for i, gf in enumerate(exported):
            body = api.CreateFilterRequest(criteria=gf.criteria, action=gf.action)
            logger.debug("Creating filter #%d", i)
            with _remote_call(f"creating filter #{i}"):
                self.service.users().settings().filters().create(
                    userId="me", body=body.model_dump(by_alias=True, exclude_none=True)
                ).execute()

    def delete_filters(self, ids: Sequence[str]) -> None:
        for filter_id in ids:
            logger.debug("Deleting filter %s", filter_id)
            with _remote_call(f'deleting filter "{filter_id}"'):
                self.service.users().settings().filters().delete(userId="me", id=filter_id).execute()
