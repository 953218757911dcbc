"""Example usage of the IServ client."""

import json

from iservpy import ConfigurationError, IServAPIClient


def main():
    """Demonstrate the workflow: login, check the cookie, read the inbox."""
    print("IServ Client - Example Usage\n")

    try:
        client = IServAPIClient.from_env()
    except ConfigurationError as e:
        print(f"[ERROR] {e}")
        return

    print(f"Logging in to {client.host} as {client.username}...")
    client.login()
    print(f"Cookies are {'valid' if client.is_cookie_valid() else 'invalid'}")

    print("\nFetching the latest messages from INBOX...")
    data = client.get_messages_for_inbox(length=10)
    print("\nResponse preview:")
    print(json.dumps(data, indent=2, ensure_ascii=False)[:500])
    if len(json.dumps(data, ensure_ascii=False)) > 500:
        print("... (truncated)")

    print("\n" + "=" * 60)
    print("API Client ready! You can now use it to make API calls.")
    print("Example:")
    print("  client.get_upcoming_events(limit=5)")
    print("=" * 60)


if __name__ == "__main__":
    main()
