"""report-datagen test suite.

- test_generators.py: per-type value rules and generator resolution
- test_schema_loader.py: concatenated-JSON schema decoding and errors
- test_emitter.py: row emission wire format and skipped rows
- test_config.py: settings file, row-count parsing, run options
- test_cli.py: end-to-end runs through generate_data.main
"""
