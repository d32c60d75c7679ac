from repository_pattern.console.create_pattern_command import CreatePatternCommand, ValidationError
from repository_pattern.console.publish_config_command import PublishConfigCommand


COMMANDS = [CreatePatternCommand, PublishConfigCommand]

__all__ = ["COMMANDS", "CreatePatternCommand", "PublishConfigCommand", "ValidationError"]
