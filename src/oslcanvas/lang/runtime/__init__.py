"""
OSL Runtime - frame-driven interpreter for OSL programs.

This module provides:
- Runtime: runs a program once per frame against a drawing surface
- Evaluator: token-slice expression evaluation
- VariableStore: dotted-path script state
- BuiltinRegistry: built-in command implementations
- ResourceLoader: load-once image and sound caches
- Host capabilities: frame timers, storage, gamepads
"""

from .values import (
    Value,
    is_number,
    is_truthy,
    to_display,
    to_number,
)

from .store import (
    DEFAULT_VARIABLES,
    VariableStore,
)

from .evaluator import (
    Evaluator,
    evaluate,
)

from .host import (
    FrameTimer,
    AsyncioFrameTimer,
    ManualFrameTimer,
    Storage,
    MemoryStorage,
    JsonFileStorage,
    GamepadButton,
    GamepadState,
    GamepadSource,
    StaticGamepads,
)

from .loaders import (
    SoundHandle,
    RecordedSound,
    ResourceFetcher,
    HttpResourceFetcher,
    ResourceLoader,
)

from .render import (
    ImageElement,
    TextElement,
    render_queue,
)

from .builtins import (
    BuiltinCommand,
    BuiltinRegistry,
    get_builtin_registry,
    call_builtin,
)

from .interpreter import (
    RunnerOptions,
    Runtime,
)

__all__ = [
    # Values
    'Value',
    'is_number',
    'is_truthy',
    'to_display',
    'to_number',
    # Store and evaluation
    'DEFAULT_VARIABLES',
    'VariableStore',
    'Evaluator',
    'evaluate',
    # Host
    'FrameTimer',
    'AsyncioFrameTimer',
    'ManualFrameTimer',
    'Storage',
    'MemoryStorage',
    'JsonFileStorage',
    'GamepadButton',
    'GamepadState',
    'GamepadSource',
    'StaticGamepads',
    # Resources
    'SoundHandle',
    'RecordedSound',
    'ResourceFetcher',
    'HttpResourceFetcher',
    'ResourceLoader',
    # Rendering
    'ImageElement',
    'TextElement',
    'render_queue',
    # Builtins
    'BuiltinCommand',
    'BuiltinRegistry',
    'get_builtin_registry',
    'call_builtin',
    # Runtime
    'RunnerOptions',
    'Runtime',
]
