"""
Watch Folders Processing Modules
Relocation of settled files and handoff to the processing pipeline
"""
from .dispatch import (
    DispatchSink, CallbackDispatchSink, LoggingDispatchSink, CommandDispatchSink, build_sink
)
from .relocation import relocate_file, resolve_destination_folder

__all__ = [
    'DispatchSink',
    'CallbackDispatchSink',
    'LoggingDispatchSink',
    'CommandDispatchSink',
    'build_sink',
    'relocate_file',
    'resolve_destination_folder',
]
