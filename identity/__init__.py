"""User data-access layer: lookups, batched resolution and cascading deactivation."""
