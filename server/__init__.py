"""
HTTP host for the rectangle detector.

Translates named method calls (detectRectangle, detectAllRectangles, ...)
into detector operations and marshals the results.
"""
