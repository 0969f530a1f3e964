"""SQLite persistence for sessions, events, agent results and plan markers."""