"""Example application wired with a generated injector module."""
