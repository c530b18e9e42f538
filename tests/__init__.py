"""Test package marker for the imapquery suites (``unit`` and ``e2e``)."""
