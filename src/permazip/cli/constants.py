"""Shared CLI constants."""

# Key in click's shared meta dict holding the --config path
CONFIG_PATH_META = "permazip.config_path"
