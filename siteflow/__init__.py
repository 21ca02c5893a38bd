"""siteflow — deployment lifecycle for Drupal sites on shared hosting."""

__version__ = "0.1.0"
