# Tests for the extension field engine
