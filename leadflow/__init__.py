"""Lead submission backend for the FieldRoutes CRM and the Payrix payment processor."""

__version__ = "1.0.0"
