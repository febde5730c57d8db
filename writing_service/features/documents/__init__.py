"""Documents feature: registered editor documents and their versions."""
