from order_store.main import main

raise SystemExit(main())
