from larcv_maker.run_larcv_maker import main

main()
