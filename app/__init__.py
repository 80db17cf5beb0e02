"""Campaign kit service application package."""
