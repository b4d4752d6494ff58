"""Core pipeline components for Inkline.

Modules
-------
config
    Environment-driven settings.
uploads
    Streaming multipart upload receiver.
media
    Media type detection and the upload allow-list.
compressor
    Size-adaptive resize and WebP re-encode.
styles
    Style presets and instruction lookup.
generation
    Client for the external image-generation service.
artifacts
    Per-request temporary file cleanup.
pipeline
    Orchestration of all of the above for one request.
"""
