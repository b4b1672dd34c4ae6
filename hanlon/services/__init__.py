"""Slice services that talk to the provisioning engine."""
