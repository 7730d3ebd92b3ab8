import filedownload

if __name__ == "__main__":
    filedownload.main()
