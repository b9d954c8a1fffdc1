"""photostrip — photo booth compositing.

Capture mirrored 640x480 frames with a user overlay composited on top,
then assemble them into a themed, bordered strip for export. Booths can
be driven interactively through CaptureSession or declared in a YAML
manifest and rendered from the command line.
"""
