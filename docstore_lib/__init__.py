"""DocStore: path-addressable documents over a remote folder backend."""
