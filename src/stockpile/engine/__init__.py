"""Pure preparedness calculations: scaling, scoring, alerts and user overrides."""
