from booking_analytics.cli import main

raise SystemExit(main())
