"""Plan synthesis core: validation, command building, estimation, presets."""
