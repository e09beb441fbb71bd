"""Water grid layers, codecs and the process-wide store."""
