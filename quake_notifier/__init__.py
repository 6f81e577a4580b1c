"""P2PQuake feed notifier."""
