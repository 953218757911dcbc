"""API client for IServ portals using requests."""

import logging
from typing import Any

import requests

from iservpy.config import load_settings
from iservpy.exceptions import IServValidationError
from iservpy.session_manager import IServSession

logger = logging.getLogger(__name__)

FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}


def _flag(value: Any) -> Any:
    # The portal expects lowercase booleans in query strings
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


class IServAPIClient(IServSession):
    """Client for the mail, calendar, file, address book and notification APIs."""

    @classmethod
    def from_env(cls, **kwargs: Any) -> "IServAPIClient":
        """
        Create a client from environment settings.

        Args:
            **kwargs: Overrides passed to the constructor

        Returns:
            IServAPIClient configured from ``ISERV_*`` variables
        """
        settings = load_settings()
        options: dict[str, Any] = {
            "log": settings.debug,
            "reuse_cookies": settings.reuse_cookies,
            "cookie_file": settings.cookie_file,
        }
        options.update(kwargs)
        creds = settings.credentials
        return cls(creds.host, creds.username, creds.password, **options)

    def get_notifications(self, since: str) -> list[dict[str, Any]]:
        """
        Get all notifications for the logged in account.

        Args:
            since: Date the server should start fetching from,
                e.g. ``2018-12-29T23:21:00+01:00``

        Returns:
            List of notifications
        """
        if not since:
            raise IServValidationError("No since given")
        logger.debug("Getting notifications since %s", since)
        response = self.get("/iserv/user/api/notifications", params={"since": since})
        logger.debug("Got notifications")
        return response.json()

    def get_mail_folders(self) -> Any:
        """Get all mail folders of the current user."""
        return self.get("iserv/mail/api/folder/list").json()

    def get_unread_mails(self) -> Any:
        """Get unread mails in the inbox."""
        return self.get("iserv/mail/api/unread/inbox").json()

    def get_messages_for_inbox(
        self,
        path: str = "INBOX",
        length: int | str = 50,
        start: int | str = 0,
        column: str = "date",
        dir: str = "desc",
    ) -> dict[str, Any]:
        """
        Get messages of a mail folder.

        Args:
            path: Folder path (default: INBOX)
            length: Number of mails returned (default: 50)
            start: Offset, 50 to start at the 50th mail (default: 0)
            column: Column used for sorting (default: date)
            dir: Sorting direction, desc or asc (default: desc)

        Returns:
            Message list payload
        """
        params = {
            "path": path,
            "length": length,
            "start": start,
            "order[column]": column,
            "order[dir]": dir,
        }
        response = self.get(
            "iserv/mail/api/message/list", headers=FORM_HEADERS, params=params
        )
        return response.json()

    def get_upcoming_events(
        self, include_subscriptions: bool = False, limit: int | str = 14
    ) -> Any:
        """
        Get upcoming calendar events.

        Args:
            include_subscriptions: Include subscribed calendars (default: False)
            limit: Maximum number of events returned (default: 14)
        """
        params = {"includeSubscriptions": _flag(include_subscriptions), "limit": limit}
        response = self.get(
            "iserv/calendar/api/upcoming", headers=FORM_HEADERS, params=params
        )
        return response.json()

    def get_user_profile_pic(
        self, user: str, w: int | str = "", h: int | str = ""
    ) -> bytes | bool:
        """
        Get a user's profile picture.

        Args:
            user: Username to get the image for
            w: Image width, leave blank for full size
            h: Image height, leave blank for full size

        Returns:
            Raw image bytes, or False if the image could not be fetched
        """
        try:
            response = self.get(f"iserv/addressbook/public/image/{user}/photo/{w}/{h}")
        except requests.RequestException as e:
            logger.debug("No profile picture for %s: %s", user, e)
            return False
        return response.content

    def get_message_by_id(self, id: int | str, path: str = "INBOX") -> dict[str, Any]:
        """
        Get a single mail message.

        Args:
            id: Message ID
            path: Folder the message lives in (default: INBOX)

        Returns:
            Message payload
        """
        logger.debug('Getting message #%s from "%s"', id, path)
        if not path:
            raise IServValidationError("No message path given")
        response = self.get("/iserv/mail/api/message", params={"path": path, "msg": id})
        return response.json()

    def user_lookup(self, query: str) -> Any:
        """Quick user lookup, as used for autocompletion."""
        if not query:
            raise IServValidationError("No query given to user lookup")
        response = self.get("iserv/addressbook/lookup", params={"query": query})
        return response.json()

    def get_folder_tree(self, subfolder: str = "") -> Any:
        """
        Get the file folder tree.

        Args:
            subfolder: Folder ID to build the tree from, blank for root
        """
        return self.get(f"iserv/file.json/{subfolder}").json()

    def get_event_sources(self) -> Any:
        """Get all event sources (calendars)."""
        return self.get("iserv/calendar/api/eventsources").json()

    def get_events_from_source(self, source: str, start: str, end: str) -> Any:
        """
        Get events of one calendar.

        Args:
            source: Path to the event source
            start: Start date of the query
            end: End date of the query
        """
        params = {"cal": source, "start": start, "end": end}
        return self.get("iserv/calendar/api/feed", params=params).json()
