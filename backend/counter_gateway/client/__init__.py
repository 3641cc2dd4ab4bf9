"""Client — async API client, counter state store and slot poller for UI front-ends."""
