"""
Stack errors
Raised for caller input that cannot be turned into a stack
"""


class StackConfigError(ValueError):
    """Stack configuration is invalid; raised before any resource is created"""

    def __init__(self, stack_name: str, message: str):
        self.stack_name = stack_name
        super().__init__(f"Invalid configuration for stack '{stack_name}': {message}")
