"""Application core: state, lifecycle and error handling."""
