"""Pure domain model for the solar lead CRM: entities, pipeline rules, errors."""
