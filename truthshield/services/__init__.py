"""Domain services: scoring rules, achievements, the question bank and report builders."""
